"""Probing media files with ffprobe and formatting their properties."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any

from qffconvert.formats import MediaType

_IMAGE_FORMAT_MARKERS = ("image2", "mjpeg", "png", "jpeg")
_KB = 1024.0
_MB = _KB * 1024
_GB = _MB * 1024


def _qround(value: float) -> int:
    return int(value + 0.5) if value >= 0 else int(value - 0.5)


def _to_double(text: str) -> float | None:
    try:
        return float(text.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class ProbeResult:
    """Detected media type and duration of a probed file."""

    media_type: MediaType
    duration_ms: int = 0
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def detect_media_type(probe_json: str | bytes) -> ProbeResult:
    """Classify ffprobe JSON output (streams and format) into a media type."""
    try:
        document = json.loads(probe_json)
    except (ValueError, TypeError):
        return ProbeResult(MediaType.UNKNOWN)
    if not isinstance(document, dict):
        return ProbeResult(MediaType.UNKNOWN)

    streams = document.get("streams")
    streams = streams if isinstance(streams, list) else []
    fmt = document.get("format")
    fmt = fmt if isinstance(fmt, dict) else {}
    format_name = fmt.get("format_name")
    format_name = format_name if isinstance(format_name, str) else ""

    duration_ms = 0
    if "duration" in fmt:
        raw = fmt["duration"]
        seconds = _to_double(raw) if isinstance(raw, str) else None
        duration_ms = _qround((seconds or 0.0) * 1000)

    has_video = has_audio = is_image = is_gif = False
    for stream in streams:
        if not isinstance(stream, dict):
            continue
        codec_type = stream.get("codec_type")
        long_name = stream.get("codec_long_name")
        long_name = long_name if isinstance(long_name, str) else ""
        if codec_type == "video":
            has_video = True
            if "gif" in long_name.lower():
                is_gif = True
            if any(marker in format_name for marker in _IMAGE_FORMAT_MARKERS):
                is_image = True
        elif codec_type == "audio":
            has_audio = True

    if is_gif:
        kind = MediaType.GIF
    elif is_image:
        kind = MediaType.IMAGE
    elif has_video:
        kind = MediaType.VIDEO
    elif has_audio:
        kind = MediaType.AUDIO
    else:
        kind = MediaType.UNKNOWN
    return ProbeResult(kind, duration_ms, document)


def probe_file(path: str | os.PathLike[str]) -> ProbeResult:
    """Run ffprobe on a file and classify it; unknown if ffprobe cannot run."""
    args = [
        "ffprobe", "-v", "quiet",
        "-print_format", "json",
        "-show_streams", "-show_format",
        os.fspath(path),
    ]
    try:
        completed = subprocess.run(args, capture_output=True, check=False)
    except OSError:
        return ProbeResult(MediaType.UNKNOWN)
    return detect_media_type(completed.stdout)


@dataclass(frozen=True)
class MediaInfo:
    """Duration and size reported by ffprobe; None where a value was unreadable."""

    duration_seconds: float | None = None
    size_bytes: int | None = None

    @property
    def duration_text(self) -> str:
        if self.duration_seconds is None:
            return "Duration: N/A"
        return format_duration(self.duration_seconds)

    @property
    def size_text(self) -> str:
        if self.size_bytes is None:
            return "N/A"
        return format_file_size(self.size_bytes)


def parse_duration_size(output: str) -> MediaInfo:
    """Parse 'duration=' and 'size=' lines of ffprobe key=value output."""
    duration: float | None = None
    size: int | None = None
    for line in output.splitlines():
        if line.startswith("duration="):
            duration = _to_double(line.strip().partition("=")[2])
        elif line.startswith("size="):
            text = line.strip().partition("=")[2]
            size = int(text) if text.isdigit() else None
    return MediaInfo(duration, size)


def _suffix(path: str | os.PathLike[str]) -> str:
    name = os.path.basename(os.fspath(path))
    return name.rpartition(".")[2] if "." in name else ""


def get_media_info(path: str | os.PathLike[str]) -> MediaInfo:
    """Ask ffprobe for a file's duration and size."""
    if not _suffix(path):
        raise ValueError("Please select a valid audio or video file.")
    args = [
        "ffprobe", "-v", "error",
        "-show_entries", "format=duration,size",
        "-of", "default=noprint_wrappers=1:nokey=0",
        os.fspath(path),
    ]
    failure = "Failed to get the duration and size of the file."
    try:
        completed = subprocess.run(args, capture_output=True, check=False)
    except OSError as exc:
        raise RuntimeError(failure) from exc
    if completed.returncode != 0:
        raise RuntimeError(failure)
    return parse_duration_size(completed.stdout.decode(errors="replace"))


def format_file_size(size: int) -> str:
    """Human-readable size with two decimals above one kilobyte."""
    if size >= _GB:
        return f"{size / _GB:.2f} GB"
    if size >= _MB:
        return f"{size / _MB:.2f} MB"
    if size >= _KB:
        return f"{size / _KB:.2f} KB"
    return f"{size} Bytes"


def format_time(ms: int) -> str:
    """Format a non-negative millisecond position as hh:mm:ss."""
    total_seconds = ms // 1000
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(seconds: float) -> str:
    """Format a duration with the shortest fitting layout and a hint of it."""
    total = _qround(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d} (hours:minutes:seconds)"
    if minutes > 0:
        return f"{minutes:02d}:{secs:02d} (minutes:seconds)"
    return f"{secs} (seconds)"