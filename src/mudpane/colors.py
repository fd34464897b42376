"""Color resolution for backend color values.

The backend tags every fragment color as either an index into the ANSI
palette or a literal 24-bit RGB value. resolve() turns one of those into a
drawable rich Color, or BASELINE when the value is the conventional default
for its role and the UI's own foreground/background should show through.

// [LAW:single-enforcer] Baseline suppression is decided here and only here.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from rich.color import Color

logger = logging.getLogger(__name__)


class ColorRole(Enum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"


class Baseline(Enum):
    """Sentinel: do not override the ambient color."""

    BASELINE = "baseline"

    def __repr__(self) -> str:
        return "BASELINE"


BASELINE = Baseline.BASELINE


@dataclass(frozen=True)
class IndexedColor:
    """Palette reference (0-255)."""

    index: int

    def __post_init__(self):
        if not 0 <= self.index <= 255:
            raise ValueError(f"color index out of range: {self.index}")


@dataclass(frozen=True)
class LiteralColor:
    """Packed 0xRRGGBB value."""

    rgb: int

    def __post_init__(self):
        if not 0 <= self.rgb <= 0xFFFFFF:
            raise ValueError(f"rgb value out of range: {self.rgb:#x}")

    @property
    def triplet(self) -> tuple[int, int, int]:
        return (self.rgb >> 16) & 0xFF, (self.rgb >> 8) & 0xFF, self.rgb & 0xFF


ColorValue = IndexedColor | LiteralColor

DEFAULT_FOREGROUND = IndexedColor(7)
DEFAULT_BACKGROUND = IndexedColor(0)

# Exact tagged values that mean "default" in each role. Compared on the tagged
# value, never on the resolved RGB.
_BASELINE_VALUES: dict[ColorRole, frozenset] = {
    ColorRole.FOREGROUND: frozenset({IndexedColor(7), LiteralColor(0xFFFFFF)}),
    ColorRole.BACKGROUND: frozenset({IndexedColor(0), LiteralColor(0x000000)}),
}


def is_baseline(role: ColorRole, value: ColorValue) -> bool:
    """True if value is the conventional default for role."""
    return value in _BASELINE_VALUES[role]


def resolve(
    role: ColorRole, value: ColorValue, palette: Sequence[Color]
) -> Color | Baseline:
    """Resolve a tagged color in a role to a drawable color or BASELINE.

    Indexed values without a palette entry are a data-quality problem, not a
    crash: they are logged and resolve to BASELINE.
    """
    if is_baseline(role, value):
        return BASELINE
    if isinstance(value, IndexedColor):
        if value.index < len(palette):
            return palette[value.index]
        logger.warning(
            "%s color index %d outside %d-entry palette; using baseline",
            role.value,
            value.index,
            len(palette),
        )
        return BASELINE
    if isinstance(value, LiteralColor):
        return Color.from_rgb(*value.triplet)
    raise TypeError(f"not a color value: {value!r}")
