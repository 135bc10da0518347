import subprocess
from unittest import mock

import pytest

from qffconvert.pythoninstaller import (
    PythonInstallError,
    PythonInstaller,
)


def _done(code):
    return subprocess.CompletedProcess(args=[], returncode=code)


@pytest.fixture(autouse=True)
def _no_url(monkeypatch):
    monkeypatch.delenv("QFF_PYTHON_URL", raising=False)


def test_default_executable_is_python3():
    assert PythonInstaller(platform="linux").executable == "python3"


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_python3_found_first(run):
    run.return_value = _done(0)
    installer = PythonInstaller(platform="linux")
    assert installer.is_python_available() is True
    assert installer.executable == "python3"
    assert run.call_args.args[0] == ["python3", "--version"]


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_falls_back_to_python(run):
    run.side_effect = [_done(1), _done(0)]
    installer = PythonInstaller(platform="linux")
    assert installer.is_python_available() is True
    assert installer.executable == "python"


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_missing_executable_falls_back(run):
    run.side_effect = [FileNotFoundError(), _done(0)]
    installer = PythonInstaller(platform="linux")
    assert installer.is_python_available() is True
    assert installer.executable == "python"


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_no_python_available(run):
    run.side_effect = [_done(1), FileNotFoundError()]
    assert PythonInstaller(platform="linux").is_python_available() is False


def test_download_not_needed_off_windows(tmp_path):
    target = tmp_path / "installer.exe"
    assert PythonInstaller(platform="linux").download_installer(target) is None
    assert not target.exists()


def test_download_requires_url_on_windows(tmp_path):
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="win32").download_installer(tmp_path / "x.exe")


def test_download_from_file_url(tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"installer-bytes")
    target = tmp_path / "out.exe"
    installer = PythonInstaller(platform="win32", download_url=source.as_uri())
    assert installer.download_installer(target) == target
    assert target.read_bytes() == b"installer-bytes"


def test_download_failure_raises(tmp_path):
    missing = (tmp_path / "missing.bin").as_uri()
    installer = PythonInstaller(platform="win32", download_url=missing)
    with pytest.raises(PythonInstallError):
        installer.download_installer(tmp_path / "out.exe")


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_windows_install_arguments(run, tmp_path):
    run.return_value = _done(1)
    path = tmp_path / "setup.exe"
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="win32").install_silently(path)
    assert run.call_args.args[0] == [
        str(path), "/quiet", "InstallAllUsers=1", "PrependPath=1", "Include_test=0",
    ]


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
def test_windows_install_failure(run, tmp_path):
    run.return_value = _done(1603)
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="win32").install_silently(tmp_path / "setup.exe")


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
@mock.patch("qffconvert.pythoninstaller.shutil.which")
def test_linux_uses_first_available_manager(which, run):
    which.side_effect = lambda name: "/usr/bin/dnf" if name == "dnf" else None
    run.return_value = _done(1)
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="linux").install_silently()
    assert run.call_args.args[0] == ["/bin/bash", "-c", "sudo dnf install -y python3"]


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
@mock.patch("qffconvert.pythoninstaller.shutil.which")
def test_linux_prefers_apt(which, run):
    which.return_value = "/usr/bin/tool"
    run.return_value = _done(1)
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="linux").install_silently()
    assert run.call_args.args[0][2] == "sudo apt update && sudo apt install -y python3"


@mock.patch("qffconvert.pythoninstaller.shutil.which", return_value=None)
def test_linux_without_manager_raises(which):
    with pytest.raises(PythonInstallError, match="No supported package manager"):
        PythonInstaller(platform="linux").install_silently()


@mock.patch("qffconvert.pythoninstaller.subprocess.run")
@mock.patch("qffconvert.pythoninstaller.shutil.which", return_value="/opt/brew")
def test_macos_uses_brew(which, run):
    run.return_value = _done(1)
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="darwin").install_silently()
    assert run.call_args.args[0] == ["brew", "install", "python3"]


@mock.patch("qffconvert.pythoninstaller.shutil.which", return_value=None)
def test_macos_without_brew_raises(which):
    with pytest.raises(PythonInstallError, match="Homebrew not found"):
        PythonInstaller(platform="darwin").install_silently()


def test_unsupported_platform_raises():
    with pytest.raises(PythonInstallError):
        PythonInstaller(platform="sunos5").install_silently()