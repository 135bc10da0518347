"""Building and running the ffmpeg commands that convert a media file."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from qffconvert.formats import MediaType

PALETTE_VIDEO_FORMATS = frozenset({"mp4", "avi", "mkv", "mov", "webm"})
MIN_FPS = 1
MAX_FPS = 60
DEFAULT_FPS = 8


class ConversionError(RuntimeError):
    """Raised when ffmpeg cannot be started or exits with an error."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


@dataclass(frozen=True)
class ConversionOptions:
    """Conversion parameters; which of them apply depends on the media type."""

    media_type: MediaType = MediaType.UNKNOWN
    output_format: str = ""
    resolution: str = "320x240"
    video_bitrate: int = 2000
    audio_bitrate: int = 128
    sample_rate: str = "44100"
    image_quality: int = 0
    fps: int = DEFAULT_FPS

    def __post_init__(self) -> None:
        try:
            kind = MediaType(self.media_type)
        except ValueError:
            kind = MediaType.UNKNOWN
        object.__setattr__(self, "media_type", kind)
        if not MIN_FPS <= self.fps <= MAX_FPS:
            raise ValueError(f"fps must be between {MIN_FPS} and {MAX_FPS}")


def palette_path(input_path: str | os.PathLike[str]) -> Path:
    """Path of the intermediate palette image written next to the input."""
    absolute = Path(os.path.abspath(os.fspath(input_path)))
    name = absolute.name
    base = name.rpartition(".")[0] if "." in name else name
    return absolute.parent / f"{base}_palette.png"


def _parameter_args(options: ConversionOptions) -> list[str]:
    args: list[str] = []
    kind = options.media_type
    if kind in (MediaType.VIDEO, MediaType.GIF):
        if options.resolution:
            args += ["-s", options.resolution]
        if options.video_bitrate > 0:
            args += ["-b:v", f"{options.video_bitrate}k"]
    if kind is MediaType.AUDIO:
        if options.audio_bitrate > 0:
            args += ["-b:a", f"{options.audio_bitrate}k"]
        if options.sample_rate:
            args += ["-ar", options.sample_rate]
    if kind is MediaType.IMAGE and options.image_quality > 0:
        args += ["-q:v", str(options.image_quality)]
    return args


def _target_format(output_path: str, options: ConversionOptions) -> str:
    if options.output_format:
        return options.output_format.lower()
    name = os.path.basename(output_path)
    return name.rpartition(".")[2].lower() if "." in name else ""


def build_ffmpeg_commands(
    input_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    options: ConversionOptions,
) -> list[list[str]]:
    """Return the ffmpeg command lines, in order, that perform a conversion."""
    source = os.fspath(input_path)
    target = os.fspath(output_path)
    fmt = _target_format(target, options)
    scale = f"fps={options.fps},scale={options.resolution}"

    if fmt == "gif":
        return [["ffmpeg", "-y", "-i", source, "-vf", scale, target]]

    if fmt in PALETTE_VIDEO_FORMATS:
        palette = str(palette_path(source))
        generate = ["ffmpeg", "-y", "-i", source, "-vf", f"{scale},palettegen=", palette]
        apply = [
            "ffmpeg", "-y",
            "-i", source,
            "-i", palette,
            "-filter_complex", f"{scale}[x];[x][1:v]paletteuse=dither=bayer",
            target,
        ]
        return [generate, apply]

    return [["ffmpeg", "-y", "-i", source, *_parameter_args(options), target]]


def run_conversion(
    input_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    options: ConversionOptions,
    on_output: Callable[[str], None] | None = None,
) -> Path:
    """Run the conversion, passing each line ffmpeg writes to stderr to ``on_output``."""
    if not os.fspath(input_path):
        raise ValueError("An input file is required.")
    if not os.fspath(output_path):
        raise ValueError("An output file is required.")

    for command in build_ffmpeg_commands(input_path, output_path, options):
        try:
            with subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            ) as proc:
                for line in proc.stderr:
                    if on_output is not None:
                        on_output(line.rstrip("\n"))
                code = proc.wait()
        except OSError as exc:
            raise ConversionError(f"Failed to start ffmpeg: {exc}") from exc
        if code != 0:
            raise ConversionError(f"ffmpeg exited with code {code}", code)
    return Path(os.fspath(output_path))