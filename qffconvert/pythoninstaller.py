"""Detecting a Python interpreter and installing one when it is missing."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

PYTHON_VERSION = "3.10.11"
PYTHON_INSTALLER_NAME = f"python-{PYTHON_VERSION}-amd64.exe"
PYTHON_URL_ENV = "QFF_PYTHON_URL"
CANDIDATE_EXECUTABLES = ("python3", "python")
WINDOWS_INSTALL_ARGS = ("/quiet", "InstallAllUsers=1", "PrependPath=1", "Include_test=0")
LINUX_INSTALL_COMMANDS = (
    ("apt", "sudo apt update && sudo apt install -y python3"),
    ("dnf", "sudo dnf install -y python3"),
    ("pacman", "sudo pacman -Sy --noconfirm python"),
)


class PythonInstallError(RuntimeError):
    """Raised when a Python installer cannot be downloaded or run."""


def _is_windows(platform: str) -> bool:
    return platform.startswith("win")


def _is_linux(platform: str) -> bool:
    return platform.startswith("linux")


def _is_macos(platform: str) -> bool:
    return platform == "darwin"


class PythonInstaller:
    """Finds a usable Python and installs one with the platform's tools.

    ``executable`` holds the name of the interpreter that was found,
    ``python3`` until a check says otherwise.
    """

    def __init__(self, platform: str | None = None, download_url: str | None = None) -> None:
        self.platform = platform if platform is not None else sys.platform
        self.download_url = download_url if download_url is not None else os.environ.get(PYTHON_URL_ENV)
        self.executable = CANDIDATE_EXECUTABLES[0]

    def is_python_available(self) -> bool:
        """True when 'python3' or 'python' answers '--version' successfully."""
        for name in CANDIDATE_EXECUTABLES:
            try:
                completed = subprocess.run(
                    [name, "--version"],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
            except OSError:
                continue
            if completed.returncode == 0:
                self.executable = name
                return True
        return False

    def download_installer(self, save_path: str | os.PathLike[str] | None = None) -> Path | None:
        """Download the Windows installer; elsewhere nothing is needed and None is returned.

        The installer location is read from the QFF_PYTHON_URL environment
        variable unless one was given to the constructor.
        """
        if not _is_windows(self.platform):
            return None
        if not self.download_url:
            raise PythonInstallError(
                f"No Python download location configured; set {PYTHON_URL_ENV}."
            )
        target = (
            Path(save_path)
            if save_path is not None
            else Path(tempfile.gettempdir()) / PYTHON_INSTALLER_NAME
        )
        try:
            response = urllib.request.urlopen(self.download_url)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise PythonInstallError(f"Download failed: {exc}") from exc
        with response:
            try:
                with open(target, "wb") as handle:
                    shutil.copyfileobj(response, handle)
            except OSError as exc:
                raise PythonInstallError(f"Failed to open file for writing: {target}") from exc
        return target

    def install_silently(self, installer_path: str | os.PathLike[str] | None = None) -> None:
        """Install Python without prompts using the platform's mechanism."""
        if _is_windows(self.platform):
            if installer_path is None:
                raise PythonInstallError("An installer path is required on Windows.")
            self._run([os.fspath(installer_path), *WINDOWS_INSTALL_ARGS])
            return
        if _is_linux(self.platform):
            for manager, command in LINUX_INSTALL_COMMANDS:
                if shutil.which(manager):
                    self._run(["/bin/bash", "-c", command])
                    return
            raise PythonInstallError("No supported package manager found.")
        if _is_macos(self.platform):
            if not shutil.which("brew"):
                raise PythonInstallError("Homebrew not found. Please install it manually.")
            self._run(["brew", "install", "python3"])
            return
        raise PythonInstallError(f"Automatic Python installation is not supported on {self.platform}.")

    @staticmethod
    def _run(command: list[str]) -> None:
        try:
            completed = subprocess.run(command, check=False)
        except OSError as exc:
            raise PythonInstallError(f"Python installation failed: {exc}") from exc
        if completed.returncode != 0:
            raise PythonInstallError(
                f"Python installation failed with exit code {completed.returncode}."
            )