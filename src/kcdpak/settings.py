"""
settings.py
User defaults for the CLI, read from settings.json in the config directory.

Example settings.json:
  {"compress_level": 9, "follow_symlinks": false, "verbose": true}

Command-line flags override these values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from kcdpak.config_paths import get_settings_path

DEFAULT_COMPRESS_LEVEL = 6


@dataclass
class Settings:
    compress_level: int = DEFAULT_COMPRESS_LEVEL
    follow_symlinks: bool = False
    verbose: bool = False


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path`` (default: the user settings.json).

    Missing or invalid file returns defaults. Unknown keys and values of
    the wrong type are ignored one by one.
    """
    settings = Settings()
    path = path if path is not None else get_settings_path()
    if not path.is_file():
        return settings
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return settings
    if not isinstance(data, dict):
        return settings

    level = data.get("compress_level")
    # bool is an int subclass
    if isinstance(level, int) and not isinstance(level, bool) and 0 <= level <= 9:
        settings.compress_level = level
    for key in ("follow_symlinks", "verbose"):
        value = data.get(key)
        if isinstance(value, bool):
            setattr(settings, key, value)
    return settings
