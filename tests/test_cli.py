"""Tests for mudpane.cli: argument parsing and app assembly."""

import pytest

import mudpane.palette
import mudpane.settings
from mudpane.backend import ScriptedBackend, StreamBridge
from mudpane.cli import build_app, build_parser, resolve_palette
from mudpane.palette import DEFAULT_ANSI_HEX, AnsiPalette, default_palette

GREY_SPEC = ",".join(["#101010"] * 16)
BLUE_SPEC = ",".join(["#0000AA"] * 16)


def _args(*argv):
    return build_parser().parse_args(list(argv))


class TestParser:
    def test_defaults(self):
        args = _args()
        assert args.host is None and args.port is None
        assert args.palette is None
        assert args.scrollback is None
        assert args.demo is False

    def test_host_port_and_options(self):
        args = _args("mud.example.org", "4000", "--scrollback", "200", "--demo")
        assert (args.host, args.port) == ("mud.example.org", 4000)
        assert args.scrollback == 200
        assert args.demo is True

    @pytest.mark.parametrize("value", ["0", "-3", "lots"])
    def test_scrollback_must_be_positive(self, value):
        with pytest.raises(SystemExit):
            _args("--demo", "--scrollback", value)

    def test_port_must_be_int(self):
        with pytest.raises(SystemExit):
            _args("mud.example.org", "telnet")


class TestResolvePalette:
    def test_default(self):
        assert resolve_palette(None) == default_palette()
        assert mudpane.palette.PALETTE == default_palette()

    def test_settings_palette(self):
        saved = AnsiPalette.from_hex(["#202020"] * 16)
        mudpane.settings.save_palette(saved)
        assert resolve_palette(None) == saved

    def test_env_beats_settings(self, monkeypatch):
        mudpane.settings.save_palette(AnsiPalette.from_hex(["#202020"] * 16))
        monkeypatch.setenv("MUDPANE_PALETTE", BLUE_SPEC)
        assert resolve_palette(None)[0].get_truecolor() == (0, 0, 0xAA)

    def test_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("MUDPANE_PALETTE", BLUE_SPEC)
        palette = resolve_palette(GREY_SPEC)
        assert palette[5].get_truecolor() == (0x10, 0x10, 0x10)
        assert mudpane.palette.PALETTE is palette

    def test_bad_cli_value_falls_through(self, caplog):
        assert resolve_palette("#FFFFFF").to_hex() == list(DEFAULT_ANSI_HEX)
        assert any("--palette" in r.message for r in caplog.records)


class TestBuildApp:
    def test_demo(self):
        app = build_app(_args("--demo"))
        backend = app.session.backend
        assert isinstance(backend, ScriptedBackend)
        assert backend.script
        assert app.sub_title == "demo"

    def test_network_saves_last_world(self):
        app = build_app(_args("mud.example.org", "4000", "--scrollback", "99"))
        backend = app.session.backend
        assert isinstance(backend, StreamBridge)
        assert (backend.host, backend.port) == ("mud.example.org", 4000)
        assert app.session.document.scrollback == 99
        assert mudpane.settings.load_last_world() == ("mud.example.org", 4000)

    def test_reuses_last_world(self):
        mudpane.settings.save_last_world("old.example.org", 2323)
        backend = build_app(_args()).session.backend
        assert (backend.host, backend.port) == ("old.example.org", 2323)

    def test_no_world_is_usage_error(self):
        with pytest.raises(SystemExit):
            build_app(_args())

    def test_scrollback_from_settings(self):
        mudpane.settings.save_setting("scrollback", 42)
        app = build_app(_args("--demo"))
        assert app.session.document.scrollback == 42
