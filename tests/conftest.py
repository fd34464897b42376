"""Shared fixtures: every test gets an isolated config dir and palette."""

import pytest

import mudpane.palette


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point settings at a temp XDG dir and clear mudpane env overrides."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for name in ("MUDPANE_PALETTE", "MUDPANE_LOG_LEVEL", "MUDPANE_LOG_FILE", "MUDPANE_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    saved = mudpane.palette.PALETTE
    yield config_home
    mudpane.palette.PALETTE = saved
