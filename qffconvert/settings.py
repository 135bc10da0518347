"""Persistent user preferences."""

from __future__ import annotations

import configparser
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from qffconvert.ffmpeg import APPLICATION_NAME, ORGANIZATION_NAME

UPDATE_SECTION = "AutoUpdate"
UPDATE_KEY = "Enabled"
_FALSE_WORDS = frozenset({"", "0", "false"})


def default_settings_path() -> Path:
    """Per-user location of the settings file."""
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
    elif sys.platform == "darwin":
        base = str(Path.home() / "Library" / "Preferences")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / ORGANIZATION_NAME / f"{APPLICATION_NAME}.conf"


def _to_bool(text: str) -> bool:
    return text.strip().lower() not in _FALSE_WORDS


def _parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # keep key case as written
    return parser


@dataclass
class Settings:
    """User preferences.

    Only ``update_enabled`` is stored on disk; ``autoplay_enabled`` lasts for
    the running session and always starts enabled.
    """

    update_enabled: bool = True
    autoplay_enabled: bool = True

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """Read settings from a file; missing or unreadable values keep their defaults."""
        target = Path(path) if path is not None else default_settings_path()
        parser = _parser()
        try:
            parser.read(target, encoding="utf-8")
        except (configparser.Error, OSError, UnicodeDecodeError):
            return cls()
        settings = cls()
        if parser.has_option(UPDATE_SECTION, UPDATE_KEY):
            settings.update_enabled = _to_bool(parser.get(UPDATE_SECTION, UPDATE_KEY))
        return settings

    def save(self, path: str | os.PathLike[str] | None = None) -> Path:
        """Write the persistent settings, keeping any other entries already in the file."""
        target = Path(path) if path is not None else default_settings_path()
        parser = _parser()
        try:
            parser.read(target, encoding="utf-8")
        except (configparser.Error, UnicodeDecodeError):
            parser = _parser()
        if not parser.has_section(UPDATE_SECTION):
            parser.add_section(UPDATE_SECTION)
        parser.set(UPDATE_SECTION, UPDATE_KEY, "true" if self.update_enabled else "false")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as handle:
            parser.write(handle, space_around_delimiters=False)
        return target