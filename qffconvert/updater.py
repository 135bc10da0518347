"""Checking a release feed for a newer version and fetching its installer."""

from __future__ import annotations

import fnmatch
import json
import os
import posixpath
import subprocess
import sys
import tempfile
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from qffconvert.ffmpeg import APPLICATION_NAME

APP_VERSION = "1.2.14"
RELEASES_URL_ENV = "QFF_RELEASES_URL"
ASSET_PREFIX = "QFFMediaConverter"
_CHUNK_SIZE = 64 * 1024
_TIMEOUT = 30.0


class UpdateError(RuntimeError):
    """Raised when checking, downloading or launching an update fails."""


def strip_version_prefix(tag: str) -> str:
    """Drop one leading 'v' from a release tag."""
    return tag[1:] if tag.startswith("v") else tag


def is_newer(latest: str, current: str) -> bool:
    """Case-insensitive textual comparison of two version strings, prefixes removed."""
    return strip_version_prefix(latest).lower() > strip_version_prefix(current).lower()


def _platform_suffix(platform: str) -> str | None:
    if platform.startswith("win"):
        return "win64.exe"
    if platform == "darwin":
        return "mac.dmg"
    if platform.startswith("linux"):
        return "linux.tar.gz"
    return None


def expected_asset_name(version: str, platform: str) -> str:
    """File name of the release asset built for a platform."""
    suffix = _platform_suffix(platform)
    if suffix is None:
        return "dist_unknown.zip"
    return f"{ASSET_PREFIX}-{version}-{suffix}"


def _installer_pattern(platform: str) -> str:
    suffix = _platform_suffix(platform)
    return "*" if suffix is None else f"{ASSET_PREFIX}-*-{suffix}"


def find_asset_url(release: dict[str, Any], name: str) -> str | None:
    """Download URL of the asset whose name matches, ignoring case."""
    assets = release.get("assets")
    if not isinstance(assets, list):
        return None
    wanted = name.lower()
    for asset in assets:
        if not isinstance(asset, dict):
            continue
        asset_name = asset.get("name")
        if isinstance(asset_name, str) and asset_name.lower() == wanted:
            url = asset.get("browser_download_url")
            return url if isinstance(url, str) and url else None
    return None


@dataclass(frozen=True)
class UpdateCheck:
    """Outcome of an update check.

    ``version`` is the release tag when an update is available and the
    running version otherwise.
    """

    update_available: bool
    version: str
    download_url: str | None = None


def _parse_release(payload: bytes) -> dict[str, Any]:
    try:
        document = json.loads(payload)
    except (ValueError, TypeError):
        return {}
    return document if isinstance(document, dict) else {}


class UpdateManager:
    """Looks up the latest release and downloads and launches its installer."""

    def __init__(
        self,
        current_version: str = APP_VERSION,
        release_url: str | None = None,
        platform: str | None = None,
        download_dir: str | os.PathLike[str] | None = None,
    ) -> None:
        self.current_version = current_version or "unknown"
        self.release_url = release_url if release_url is not None else os.environ.get(RELEASES_URL_ENV)
        self.platform = platform if platform is not None else sys.platform
        self.download_dir = Path(download_dir) if download_dir is not None else Path(tempfile.gettempdir())

    def check_for_updates(self) -> UpdateCheck:
        """Fetch the latest release description and decide whether to update."""
        if not self.release_url:
            raise UpdateError(f"No release feed configured; set {RELEASES_URL_ENV}.")
        request = urllib.request.Request(
            self.release_url, headers={"User-Agent": f"{APPLICATION_NAME}-Updater"}
        )
        try:
            with urllib.request.urlopen(request, timeout=_TIMEOUT) as response:
                payload = response.read()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise UpdateError(f"Failed to check for updates: {exc}") from exc
        return self._evaluate(_parse_release(payload))

    def _evaluate(self, release: dict[str, Any]) -> UpdateCheck:
        tag = release.get("tag_name")
        tag = tag if isinstance(tag, str) else ""
        name = expected_asset_name(strip_version_prefix(tag), self.platform)
        url = find_asset_url(release, name)
        if url and is_newer(tag, self.current_version):
            return UpdateCheck(True, tag, url)
        return UpdateCheck(False, self.current_version)

    def download_update(
        self,
        url: str,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> Path:
        """Save the asset at ``url`` into the download directory.

        ``on_progress`` receives bytes received and the total, -1 when unknown.
        """
        path = urllib.parse.unquote(urllib.parse.urlsplit(url).path)
        target = self.download_dir / posixpath.basename(path)
        try:
            handle = open(target, "wb")
        except OSError as exc:
            raise UpdateError(f"Could not open file for download: {exc}") from exc
        with handle:
            try:
                with urllib.request.urlopen(url, timeout=_TIMEOUT) as response:
                    length = response.headers.get("Content-Length")
                    total = int(length) if length and length.isdigit() else -1
                    received = 0
                    while chunk := response.read(_CHUNK_SIZE):
                        handle.write(chunk)
                        received += len(chunk)
                        if on_progress is not None:
                            on_progress(received, total)
            except (urllib.error.URLError, OSError, ValueError) as exc:
                raise UpdateError(f"Update download failed: {exc}") from exc
        return target

    def initiate_update(self, directory: str | os.PathLike[str] | None = None) -> Path:
        """Launch the first downloaded installer found, detached from this process."""
        folder = Path(directory) if directory is not None else self.download_dir
        pattern = _installer_pattern(self.platform)
        try:
            matches = sorted(
                entry for entry in folder.iterdir()
                if entry.is_file() and fnmatch.fnmatch(entry.name, pattern)
            )
        except OSError:
            matches = []
        if not matches:
            raise UpdateError(f"No installer found in temp directory: {folder}")
        installer = matches[0].resolve()
        options: dict[str, Any] = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
        }
        if os.name == "nt":
            options["creationflags"] = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
                subprocess, "CREATE_NEW_PROCESS_GROUP", 0
            )
        else:
            options["start_new_session"] = True
        try:
            subprocess.Popen([str(installer)], **options)
        except OSError as exc:
            raise UpdateError(f"Failed to launch installer: {installer}") from exc
        return installer