"""Command-line front end for converting and inspecting media files."""

from __future__ import annotations

import argparse
import datetime
import os
import platform
import sys
from typing import Sequence

from qffconvert.conversion import DEFAULT_FPS, ConversionError, ConversionOptions, run_conversion
from qffconvert.ffmpeg import (
    APPLICATION_NAME,
    ORGANIZATION_NAME,
    FfmpegInstallError,
    download_and_install_ffmpeg,
    get_ffmpeg_path,
    get_ffmpeg_version,
    is_ffmpeg_available,
    parse_ffmpeg_version,
)
from qffconvert.formats import MediaType, default_output_path, formats_for
from qffconvert.probe import get_media_info, probe_file
from qffconvert.progress import DownloadProgress
from qffconvert.pythoninstaller import PythonInstaller, PythonInstallError
from qffconvert.settings import Settings
from qffconvert.updater import APP_VERSION, UpdateError, UpdateManager


def about_text(ffmpeg_output: str, year: int | None = None) -> str:
    """Text describing the application and the versions it runs with."""
    shown_year = year if year is not None else datetime.date.today().year
    return (
        f"{APPLICATION_NAME} (Version: {APP_VERSION})\n"
        f"Powered by Python (Version: {platform.python_version()}) "
        f"and FFmpeg (Version: {parse_ffmpeg_version(ffmpeg_output)})\n"
        f"{ORGANIZATION_NAME} {shown_year}"
    )


def _error(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _extension(path: str) -> str:
    name = os.path.basename(path)
    return name.rpartition(".")[2] if "." in name else ""


def _cmd_convert(args: argparse.Namespace) -> int:
    probe = probe_file(args.input)
    kind = probe.media_type
    print(f"Detected file type: {kind.value}")
    fmt = args.format or (args.output and _extension(args.output)) or formats_for(kind)[0]
    output = args.output or str(default_output_path(args.input, fmt))
    try:
        options = ConversionOptions(
            media_type=kind,
            output_format=fmt,
            resolution=args.resolution,
            video_bitrate=args.video_bitrate,
            audio_bitrate=args.audio_bitrate,
            sample_rate=args.sample_rate,
            image_quality=args.quality,
            fps=args.fps,
        )
        result = run_conversion(
            args.input, output, options, lambda line: print(line, file=sys.stderr)
        )
    except (ValueError, ConversionError) as exc:
        return _error(f"Conversion failed: {exc}")
    print("Conversion completed.")
    print(result)
    return 0


def _cmd_probe(args: argparse.Namespace) -> int:
    probe = probe_file(args.input)
    print(f"Detected file type: {probe.media_type.value}")
    try:
        info = get_media_info(args.input)
    except (ValueError, RuntimeError) as exc:
        return _error(str(exc))
    print(f"Duration: {info.duration_text}")
    print(f"Size: {info.size_text}")
    return 0


def _cmd_formats(args: argparse.Namespace) -> int:
    for fmt in formats_for(args.media_type):
        print(fmt)
    return 0


def _cmd_settings(args: argparse.Namespace, settings: Settings, path: str | None) -> int:
    if args.auto_update is not None:
        settings.update_enabled = args.auto_update == "on"
        settings.save(path)
    state = "enabled" if settings.update_enabled else "disabled"
    print(f"Auto-Update on Startup: {state}")
    return 0


def _cmd_update(args: argparse.Namespace) -> int:
    manager = UpdateManager()
    try:
        check = manager.check_for_updates()
    except UpdateError as exc:
        return _error(f"An error occurred during update: {exc}")
    if not check.update_available or check.download_url is None:
        print(f"No update available. Current version: {check.version}")
        return 0
    print(
        f"A new version ({check.version}) of {APPLICATION_NAME} is available! "
        "Downloading now..."
    )
    if args.check_only:
        return 0
    progress = DownloadProgress(on_change=lambda state: print(state.status))
    try:
        manager.download_update(check.download_url, progress.update)
    except UpdateError as exc:
        progress.finish(False, str(exc))
        return 1
    progress.finish(True)
    try:
        installer = manager.initiate_update()
    except UpdateError as exc:
        return _error(f"An error occurred during update: {exc}")
    print(f"Application will now close to apply the update: {installer}")
    return 0


def _cmd_setup(args: argparse.Namespace) -> int:
    installer = PythonInstaller()
    if not installer.is_python_available():
        print("Python not found. Downloading and installing...")
        try:
            path = installer.download_installer()
        except PythonInstallError as exc:
            return _error(f"Could not download Python installer. {exc}")
        try:
            installer.install_silently(path)
        except PythonInstallError as exc:
            return _error(f"Python installation failed. {exc}")
        print("Python installed successfully.")
    print("Checking for FFmpeg...")
    if is_ffmpeg_available():
        print("FFmpeg is installed.")
        return 0
    print("FFmpeg not found. Downloading...")
    try:
        download_and_install_ffmpeg()
    except FfmpegInstallError as exc:
        return _error(f"Download failed: {exc}")
    print("FFmpeg installed successfully!")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qffconvert", description=APPLICATION_NAME)
    parser.add_argument("--settings", help="path of the settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", help="convert a media file")
    convert.add_argument("input")
    convert.add_argument("-o", "--output")
    convert.add_argument("-f", "--format")
    convert.add_argument("--resolution", default="320x240")
    convert.add_argument("--video-bitrate", type=int, default=2000)
    convert.add_argument("--audio-bitrate", type=int, default=128)
    convert.add_argument("--sample-rate", default="44100")
    convert.add_argument("--quality", type=int, default=0)
    convert.add_argument("--fps", type=int, default=DEFAULT_FPS)

    probe = sub.add_parser("probe", help="show type, duration and size of a file")
    probe.add_argument("input")

    formats = sub.add_parser("formats", help="list output formats for a media type")
    formats.add_argument(
        "media_type", nargs="?", default=MediaType.UNKNOWN.value,
        choices=[kind.value for kind in MediaType],
    )

    sub.add_parser("ffmpeg-path", help="show where ffmpeg is")
    sub.add_parser("ffmpeg-version", help="show the ffmpeg version output")
    sub.add_parser("about", help="show version information")

    settings = sub.add_parser("settings", help="show or change preferences")
    settings.add_argument("--auto-update", choices=["on", "off"])

    update = sub.add_parser("update", help="check for and install a newer release")
    update.add_argument("--check-only", action="store_true")

    sub.add_parser("setup", help="make sure Python and ffmpeg are installed")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    if args.command == "convert":
        return _cmd_convert(args)
    if args.command == "probe":
        return _cmd_probe(args)
    if args.command == "formats":
        return _cmd_formats(args)
    if args.command == "ffmpeg-path":
        print(get_ffmpeg_path())
        return 0
    if args.command == "ffmpeg-version":
        print(get_ffmpeg_version())
        return 0
    if args.command == "about":
        print(about_text(get_ffmpeg_version()))
        return 0
    if args.command == "settings":
        return _cmd_settings(args, Settings.load(args.settings), args.settings)
    if args.command == "update":
        return _cmd_update(args)
    return _cmd_setup(args)


if __name__ == "__main__":
    sys.exit(main())