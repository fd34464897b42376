"""ANSI 4-bit color palette.

A palette is a fixed 16-entry table indexed 0-15: the eight normal colors
(black, red, green, yellow, blue, magenta, cyan, light gray) followed by
their bright counterparts. Indexed color values from the backend are
resolved against it.

// [LAW:one-source-of-truth] PALETTE is the process-wide default. Renderers
//   take the palette as a parameter; only the app/CLI reads the global.
"""

import logging
import os
from collections.abc import Iterable, Iterator, Sequence

from rich.color import Color

from mudpane.errors import PaletteError

logger = logging.getLogger(__name__)

PALETTE_SIZE = 16

DEFAULT_ANSI_HEX: tuple[str, ...] = (
    "#000000",  # black
    "#800000",  # red
    "#008000",  # green
    "#808000",  # yellow
    "#000080",  # blue
    "#800080",  # magenta
    "#008080",  # cyan
    "#C0C0C0",  # light gray
    "#808080",  # bright black
    "#FF0000",  # bright red
    "#00FF00",  # bright green
    "#FFFF00",  # bright yellow
    "#0000FF",  # bright blue
    "#FF00FF",  # bright magenta
    "#00FFFF",  # bright cyan
    "#FFFFFF",  # bright white
)


def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse #RRGGBB (leading # optional) to (r, g, b) ints."""
    h = hex_color.strip().lstrip("#")
    if len(h) != 6:
        raise PaletteError(f"expected #RRGGBB, got {hex_color!r}")
    try:
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        raise PaletteError(f"expected #RRGGBB, got {hex_color!r}") from None


class AnsiPalette(Sequence):
    """Immutable 16-entry table of drawable colors."""

    __slots__ = ("_colors",)

    def __init__(self, colors: Iterable[Color]):
        colors = tuple(colors)
        if len(colors) != PALETTE_SIZE:
            raise PaletteError(
                f"palette needs {PALETTE_SIZE} colors, got {len(colors)}"
            )
        self._colors: tuple[Color, ...] = colors

    @classmethod
    def from_hex(cls, hex_colors: Iterable[str]) -> "AnsiPalette":
        """Build a palette from #RRGGBB strings."""
        return cls(Color.from_rgb(*_hex_to_rgb(h)) for h in hex_colors)

    def __getitem__(self, index):
        return self._colors[index]

    def __len__(self) -> int:
        return len(self._colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self._colors)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AnsiPalette):
            return NotImplemented
        return self._colors == other._colors

    def __hash__(self) -> int:
        return hash(self._colors)

    def __repr__(self) -> str:
        return f"AnsiPalette({self.to_hex()!r})"

    def to_hex(self) -> list[str]:
        """Serialize to #RRGGBB strings (settings file format)."""
        return [c.get_truecolor().hex.upper() for c in self._colors]

    def replace(self, index: int, color: Color) -> "AnsiPalette":
        """Return a copy with one entry swapped."""
        colors = list(self._colors)
        colors[index] = color
        return AnsiPalette(colors)


def default_palette() -> AnsiPalette:
    """The conventional ANSI 4-bit palette."""
    return AnsiPalette.from_hex(DEFAULT_ANSI_HEX)


def parse_palette_spec(spec: str) -> AnsiPalette:
    """Parse a comma-separated list of 16 hex colors."""
    entries = [part for part in (p.strip() for p in spec.split(",")) if part]
    return AnsiPalette.from_hex(entries)


def _palette_from_env() -> AnsiPalette | None:
    env = os.environ.get("MUDPANE_PALETTE")
    if not env:
        return None
    try:
        return parse_palette_spec(env)
    except PaletteError as exc:
        logger.warning("invalid MUDPANE_PALETTE (%s), using default", exc)
        return None


def init_palette(palette: AnsiPalette | None = None) -> AnsiPalette:
    """Replace the process-wide default palette.

    With no argument, re-reads MUDPANE_PALETTE and falls back to the
    built-in default. Returns the palette now in effect.
    """
    global PALETTE
    PALETTE = palette or _palette_from_env() or default_palette()
    return PALETTE


# Module-level singleton; consumers import the module, not the name
PALETTE: AnsiPalette = _palette_from_env() or default_palette()
