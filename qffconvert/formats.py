"""Supported container formats and output path helpers."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class MediaType(str, Enum):
    """Kind of media detected in an input file."""

    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    GIF = "gif"
    UNKNOWN = "unknown"


VIDEO_FORMATS: tuple[str, ...] = (
    "mp4", "mkv", "avi", "mov", "webm", "flv", "wmv", "mpg", "3gp", "ts", "ogv", "vob", "m4v",
)
AUDIO_FORMATS: tuple[str, ...] = (
    "mp3", "aac", "wav", "flac", "ogg", "opus", "m4a", "wma", "aiff", "ac3", "dts",
)
IMAGE_FORMATS: tuple[str, ...] = (
    "png", "jpg", "jpeg", "bmp", "tiff", "webp", "ico", "tga", "ppm",
)
GIF_FORMATS: tuple[str, ...] = ("gif",)

DEFAULT_EXTENSION = "mp4"


def _unique_sorted(*groups: tuple[str, ...]) -> list[str]:
    return sorted({fmt for group in groups for fmt in group})


def formats_for(media_type: MediaType | str) -> list[str]:
    """Return the output formats offered for a given media type."""
    try:
        kind = MediaType(media_type)
    except ValueError:
        kind = MediaType.UNKNOWN
    if kind is MediaType.VIDEO:
        return list(VIDEO_FORMATS)
    if kind is MediaType.AUDIO:
        return list(AUDIO_FORMATS)
    if kind is MediaType.IMAGE:
        return list(IMAGE_FORMATS)
    if kind is MediaType.GIF:
        return _unique_sorted(VIDEO_FORMATS, IMAGE_FORMATS, GIF_FORMATS)
    return _unique_sorted(VIDEO_FORMATS, AUDIO_FORMATS, IMAGE_FORMATS, GIF_FORMATS)


def file_dialog_filter() -> str:
    """Build the file-selection filter string listing every supported format."""
    groups = (VIDEO_FORMATS, AUDIO_FORMATS, IMAGE_FORMATS, GIF_FORMATS)
    patterns = " ".join(f"*.{fmt}" for group in groups for fmt in group)
    return f"QFF Media Files ({patterns});;All Files (*.*)"


def _complete_base_name(name: str) -> str:
    """File name without its last suffix."""
    dot = name.rfind(".")
    return name if dot < 0 else name[:dot]


def default_output_path(input_path: str | os.PathLike[str], extension: str) -> Path:
    """Path next to the input named '<base>_converted.<extension>'."""
    ext = extension or DEFAULT_EXTENSION
    absolute = Path(os.path.abspath(os.fspath(input_path)))
    base = _complete_base_name(absolute.name)
    return absolute.parent / f"{base}_converted.{ext}"