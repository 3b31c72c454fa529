"""
config_paths.py
Central helpers for resolving the user config directory.

Follows the XDG Base Directory Specification:
  Config lives in $XDG_CONFIG_HOME/KCDToolkit  (default: ~/.config/KCDToolkit)
"""

import os
from pathlib import Path

APP_NAME = "KCDToolkit"


def get_config_dir() -> Path:
    """Return the app config directory. It is not created here; nothing writes to it.

    Respects $XDG_CONFIG_HOME; falls back to ~/.config/KCDToolkit.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


def get_settings_path() -> Path:
    """Return the path to settings.json in the config directory.

    Result: ~/.config/KCDToolkit/settings.json
    """
    return get_config_dir() / "settings.json"
