"""CLI entry point for mudpane."""

import argparse
import logging
import os

import mudpane.io.logging_setup
import mudpane.palette
import mudpane.settings
from mudpane.backend import ScriptedBackend, StreamBridge
from mudpane.demo import demo_events, demo_responder
from mudpane.errors import PaletteError
from mudpane.palette import AnsiPalette
from mudpane.tui.app import MudpaneApp

logger = logging.getLogger(__name__)


def resolve_palette(cli_value: str | None) -> AnsiPalette:
    """Pick the palette: --palette, then MUDPANE_PALETTE, then settings, then default."""
    if cli_value:
        try:
            return mudpane.palette.init_palette(mudpane.palette.parse_palette_spec(cli_value))
        except PaletteError as exc:
            logger.warning("invalid --palette (%s), ignoring", exc)
    if os.environ.get("MUDPANE_PALETTE"):
        return mudpane.palette.init_palette()
    return mudpane.palette.init_palette(mudpane.settings.load_palette())


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Terminal client for MUD worlds")
    parser.add_argument("host", nargs="?", default=None, help="World host (default: last used)")
    parser.add_argument("port", nargs="?", type=int, default=None, help="World port")
    parser.add_argument(
        "--palette",
        type=str,
        default=None,
        help="16 comma-separated #RRGGBB colors for ANSI indices 0-15. Env: MUDPANE_PALETTE",
    )
    parser.add_argument(
        "--scrollback",
        type=_positive_int,
        default=None,
        help="Max lines of history to keep (default: settings, else 5000)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        default=False,
        help="Run against a built-in scripted world instead of the network",
    )
    return parser


def build_app(args: argparse.Namespace, parser: argparse.ArgumentParser | None = None) -> MudpaneApp:
    palette = resolve_palette(args.palette)
    scrollback = args.scrollback if args.scrollback is not None else mudpane.settings.load_scrollback()
    echo_color = mudpane.settings.load_echo_color()

    if args.demo:
        backend = ScriptedBackend(demo_events(), responder=demo_responder, hold_open=True)
        world_name = "demo"
    else:
        host, port = args.host, args.port
        if host is None or port is None:
            last = mudpane.settings.load_last_world()
            if last is None:
                (parser or build_parser()).error("host and port are required (no previous world saved)")
            host = host or last[0]
            port = port or last[1]
        mudpane.settings.save_last_world(host, port)
        backend = StreamBridge(host, port)
        world_name = f"{host}:{port}"

    logger.info("starting session for %s", world_name)
    return MudpaneApp(
        backend,
        palette=palette,
        scrollback=scrollback,
        echo_color=echo_color,
        world_name=world_name,
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.demo:
        world = "demo"
    else:
        world = ":".join(str(part) for part in (args.host, args.port) if part) or "mudpane"
    mudpane.io.logging_setup.configure(world)
    app = build_app(args, parser)
    app.run()


if __name__ == "__main__":
    main()
