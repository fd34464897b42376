"""Output events emitted by the backend, consumed in stream order.

// [LAW:one-source-of-truth] The class IS the type; there is no event_type string field.

Events have no identity beyond their position in the stream and are never
mutated after construction.
"""

from dataclasses import dataclass, field
from enum import Enum

from mudpane.colors import DEFAULT_BACKGROUND, DEFAULT_FOREGROUND, ColorValue
from mudpane.links import ActionLink


# ─── Text fragments ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextFragment:
    """One styled run of text as emitted by the backend.

    text holds the raw bytes, expected to be UTF-8.
    """

    text: bytes
    foreground: ColorValue = DEFAULT_FOREGROUND
    background: ColorValue = DEFAULT_BACKGROUND
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    inverse: bool = False
    blink: bool = False
    highlight: bool = False
    link: ActionLink | None = None

    @classmethod
    def of(cls, text: str, **kwargs) -> "TextFragment":
        """Build a fragment from a str (encoded as UTF-8)."""
        return cls(text.encode("utf-8"), **kwargs)


# ─── Enums ────────────────────────────────────────────────────────────────────


class Effect(Enum):
    """Terminal side effects carried in the output stream."""

    BEEP = "beep"
    BACKSPACE = "backspace"
    CARRIAGE_RETURN = "carriage_return"
    ERASE_CHARACTER = "erase_character"
    ERASE_LINE = "erase_line"


# ─── Output event hierarchy ───────────────────────────────────────────────────


@dataclass(frozen=True)
class OutputEvent:
    """Base class for all output events."""


@dataclass(frozen=True)
class TextEvent(OutputEvent):
    fragment: TextFragment


@dataclass(frozen=True)
class LineBreak(OutputEvent):
    pass


@dataclass(frozen=True)
class EffectEvent(OutputEvent):
    effect: Effect


@dataclass(frozen=True)
class StructuralMarker(OutputEvent):
    """Non-text separator. Opaque to styling."""


@dataclass(frozen=True)
class HorizontalRule(StructuralMarker):
    pass


@dataclass(frozen=True)
class Image(StructuralMarker):
    src: str = field(default="")


@dataclass(frozen=True)
class PageBreak(StructuralMarker):
    pass


def text(value: str, **style) -> TextEvent:
    """Shorthand for a TextEvent built from a str."""
    return TextEvent(TextFragment.of(value, **style))


LINE_BREAK = LineBreak()
BELL = EffectEvent(Effect.BEEP)
