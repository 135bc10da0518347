"""Locating, querying and installing the ffmpeg executable."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
import urllib.error
import urllib.request
import zipfile
from pathlib import Path

ORGANIZATION_NAME = "Bitmutex Technologies"
APPLICATION_NAME = "QFF Media Converter"
FFMPEG_URL_ENV = "QFF_FFMPEG_URL"
NOT_IN_PATH = "FFmpeg not found in PATH."
NOT_IN_SYSTEM_PATH = "FFmpeg not found in system PATH."
FAILED_TO_RUN = "Failed to run ffmpeg."
NO_OUTPUT = "No output from ffmpeg."
UNKNOWN_VERSION = "Unknown"
PACKAGE_MANAGER_HINT = (
    "Please install ffmpeg using your package manager (e.g., sudo apt install ffmpeg)."
)
_VERSION_RE = re.compile(r"ffmpeg version\s+(\S+)")
_RUN_TIMEOUT = 2.0


class FfmpegInstallError(RuntimeError):
    """Raised when ffmpeg cannot be downloaded or installed."""


def is_ffmpeg_available() -> bool:
    """True when 'ffmpeg -version' runs successfully and identifies itself."""
    try:
        completed = subprocess.run(
            ["ffmpeg", "-version"], capture_output=True, text=True, errors="replace", check=False
        )
    except OSError:
        return False
    return completed.returncode == 0 and "ffmpeg version" in completed.stdout


def _app_data_dir() -> Path:
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
    else:
        base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / ORGANIZATION_NAME / APPLICATION_NAME


def _find_bin_dir(root: Path) -> Path | None:
    for name in ("ffmpeg.exe", "ffmpeg"):
        for candidate in sorted(root.rglob(name)):
            if candidate.is_file():
                return candidate.parent
    return None


def download_and_install_ffmpeg(dest_dir: str | os.PathLike[str] | None = None) -> Path:
    """Download an ffmpeg build, unpack it and put its bin directory on PATH.

    Only supported on Windows; the archive location is read from the
    QFF_FFMPEG_URL environment variable. Returns the bin directory.
    """
    if not sys.platform.startswith("win"):
        raise FfmpegInstallError(PACKAGE_MANAGER_HINT)
    url = os.environ.get(FFMPEG_URL_ENV)
    if not url:
        raise FfmpegInstallError(
            f"No FFmpeg download location configured; set {FFMPEG_URL_ENV}."
        )

    target = Path(dest_dir) if dest_dir is not None else _app_data_dir() / "ffmpeg"
    target.mkdir(parents=True, exist_ok=True)
    zip_path = target / "ffmpeg.zip"

    try:
        with urllib.request.urlopen(url) as response:
            payload = response.read()
    except (urllib.error.URLError, OSError) as exc:
        raise FfmpegInstallError(f"Failed to download ffmpeg: {exc}") from exc

    try:
        zip_path.write_bytes(payload)
    except OSError as exc:
        raise FfmpegInstallError("Failed to save ffmpeg.zip") from exc

    try:
        with zipfile.ZipFile(zip_path) as archive:
            archive.extractall(target)
    except (zipfile.BadZipFile, OSError) as exc:
        raise FfmpegInstallError(f"Failed to extract ffmpeg: {exc}") from exc

    bin_dir = _find_bin_dir(target)
    if bin_dir is None:
        raise FfmpegInstallError("The downloaded archive does not contain ffmpeg.")

    current = os.environ.get("PATH", "")
    entries = current.split(os.pathsep) if current else []
    if str(bin_dir) not in entries:
        os.environ["PATH"] = os.pathsep.join([str(bin_dir), *entries])
    return bin_dir


def get_ffmpeg_path() -> str:
    """Location of ffmpeg on PATH, or a message saying it was not found."""
    return shutil.which("ffmpeg") or NOT_IN_PATH


def get_ffmpeg_version() -> str:
    """Full 'ffmpeg -version' output, or a message describing why there is none."""
    executable = shutil.which("ffmpeg")
    if not executable:
        return NOT_IN_SYSTEM_PATH
    try:
        completed = subprocess.run(
            [executable, "-version"],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=_RUN_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return FAILED_TO_RUN
    output = completed.stdout or completed.stderr
    return output or NO_OUTPUT


def parse_ffmpeg_version(output: str) -> str:
    """Extract the version token from 'ffmpeg -version' output, or 'Unknown'."""
    match = _VERSION_RE.search(output)
    return match.group(1) if match else UNKNOWN_VERSION