import platform

import pytest

from qffconvert.cli import about_text, main
from qffconvert.ffmpeg import NOT_IN_PATH, NOT_IN_SYSTEM_PATH, UNKNOWN_VERSION
from qffconvert.formats import formats_for
from qffconvert.settings import Settings
from qffconvert.updater import APP_VERSION, RELEASES_URL_ENV


@pytest.fixture
def no_tools(tmp_path, monkeypatch):
    empty = tmp_path / "emptybin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty


def test_about_text_parses_version():
    text = about_text("ffmpeg version 6.0 built with gcc", 2030)
    assert "FFmpeg (Version: 6.0)" in text
    assert f"(Version: {APP_VERSION})" in text
    assert platform.python_version() in text
    assert "2030" in text


def test_about_text_unknown_version():
    text = about_text("garbage output", 2030)
    assert f"FFmpeg (Version: {UNKNOWN_VERSION})" in text


def test_formats_command(capsys):
    assert main(["formats", "audio"]) == 0
    assert capsys.readouterr().out.split() == formats_for("audio")


def test_formats_default_is_all(capsys):
    assert main(["formats"]) == 0
    assert capsys.readouterr().out.split() == formats_for("unknown")


def test_ffmpeg_path_missing(no_tools, capsys):
    assert main(["ffmpeg-path"]) == 0
    assert capsys.readouterr().out.strip() == NOT_IN_PATH


def test_ffmpeg_version_missing(no_tools, capsys):
    assert main(["ffmpeg-version"]) == 0
    assert capsys.readouterr().out.strip() == NOT_IN_SYSTEM_PATH


def test_about_command_without_ffmpeg(no_tools, capsys):
    assert main(["about"]) == 0
    assert f"FFmpeg (Version: {UNKNOWN_VERSION})" in capsys.readouterr().out


def test_settings_command_persists(tmp_path, capsys):
    path = tmp_path / "settings.conf"
    assert main(["--settings", str(path), "settings", "--auto-update", "off"]) == 0
    assert Settings.load(path).update_enabled is False
    assert "disabled" in capsys.readouterr().out
    assert main(["--settings", str(path), "settings", "--auto-update", "on"]) == 0
    assert Settings.load(path).update_enabled is True


def test_settings_command_reports_default(tmp_path, capsys):
    path = tmp_path / "settings.conf"
    assert main(["--settings", str(path), "settings"]) == 0
    assert "enabled" in capsys.readouterr().out
    assert not path.exists()


def test_convert_requires_input():
    with pytest.raises(SystemExit) as info:
        main(["convert"])
    assert info.value.code == 2


def test_convert_fails_without_ffmpeg(no_tools, tmp_path, capsys):
    source = tmp_path / "clip.mp3"
    source.write_bytes(b"\x00" * 16)
    assert main(["convert", str(source)]) == 1
    assert "Conversion failed" in capsys.readouterr().err


def test_convert_rejects_bad_fps(no_tools, tmp_path, capsys):
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"\x00" * 16)
    assert main(["convert", str(source), "--fps", "0"]) == 1
    assert "fps" in capsys.readouterr().err


def test_probe_requires_suffix(no_tools, tmp_path, capsys):
    source = tmp_path / "noext"
    source.write_bytes(b"\x00")
    assert main(["probe", str(source)]) == 1
    assert "Please select a valid audio or video file." in capsys.readouterr().err


def test_update_without_feed(monkeypatch, capsys):
    monkeypatch.delenv(RELEASES_URL_ENV, raising=False)
    assert main(["update", "--check-only"]) == 1
    assert "An error occurred during update" in capsys.readouterr().err