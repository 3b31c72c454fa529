from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory so user settings never leak in."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def mod_tree(tmp_path: Path) -> Path:
    """readme.txt (12 bytes), data/ and data/config.json (40 bytes)."""
    root = tmp_path / "mod"
    (root / "data").mkdir(parents=True)
    (root / "readme.txt").write_bytes(b"hello world\n")
    (root / "data" / "config.json").write_bytes(b'{"name": "kcd-mod", "version": "1.0.0"}\n')
    return root
