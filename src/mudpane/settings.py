"""Settings file I/O for mudpane.

Manages a JSON settings file at XDG_CONFIG_HOME/mudpane/settings.json.
Every reader tolerates a missing or corrupt file and falls back to defaults.

Import as: import mudpane.settings
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from mudpane.assembler import DEFAULT_SCROLLBACK
from mudpane.errors import PaletteError
from mudpane.palette import AnsiPalette
from mudpane.rendering import DEFAULT_ECHO_COLOR

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """XDG_CONFIG_HOME (default ~/.config) / mudpane / settings.json."""
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "mudpane" / "settings.json"


def load_settings() -> dict:
    """Read every setting. Missing, unreadable or non-object files read as {}."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: not a JSON object", path)
        return {}
    return data


def save_settings(data: dict) -> None:
    """Replace the settings file with data.

    The JSON goes to a sibling temp file first and is renamed into place, so a
    crash mid-write leaves the previous settings intact.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """One key from the settings file, or default."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Set one key, keeping every other saved setting."""
    data = load_settings()
    data[key] = value
    save_settings(data)


def load_palette() -> AnsiPalette | None:
    """Saved palette, or None if unset or invalid."""
    raw = load_setting("palette")
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(h, str) for h in raw):
        logger.warning("ignoring saved palette: expected a list of hex strings")
        return None
    try:
        return AnsiPalette.from_hex(raw)
    except PaletteError as exc:
        logger.warning("ignoring saved palette: %s", exc)
        return None


def save_palette(palette: AnsiPalette) -> None:
    save_setting("palette", palette.to_hex())


def load_scrollback() -> int:
    value = load_setting("scrollback", DEFAULT_SCROLLBACK)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        logger.warning("ignoring invalid scrollback %r", value)
        return DEFAULT_SCROLLBACK
    return value


def load_echo_color() -> str:
    value = load_setting("echo_color", DEFAULT_ECHO_COLOR)
    return value if isinstance(value, str) and value else DEFAULT_ECHO_COLOR


def load_last_world() -> tuple[str, int] | None:
    """Last connected (host, port), or None."""
    data = load_settings()
    host, port = data.get("last_host"), data.get("last_port")
    if isinstance(host, str) and host and isinstance(port, int):
        return host, port
    return None


def save_last_world(host: str, port: int) -> None:
    data = load_settings()
    data["last_host"] = host
    data["last_port"] = port
    save_settings(data)
