"""Line assembler: ordered output events -> styled, line-broken document.

The backend often ends a prompt line with a break that is immediately
followed by more same-line output, or by nothing at all. Breaks are therefore
deferred: a LineBreak only sets DEFERRED_BREAK, and the separator is
committed when a later Text or LineBreak proves the line is continuing. A
break at end-of-stream never produces a trailing blank line, and every break
yields at most one separator.

Committing a separator seals the current visual line; the document is an
ordered list of sealed lines plus one open line being appended to.

// [LAW:one-source-of-truth] AssemblerState is the sole record of a pending
//   break; nothing is inferred from accumulated text.
// [LAW:dataflow-not-control-flow] Post-event states live in _NEXT_STATE.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from enum import Enum

from rich.color import Color
from rich.text import Text

import mudpane.palette
from mudpane.event_types import (
    Effect,
    EffectEvent,
    LineBreak,
    OutputEvent,
    StructuralMarker,
    TextEvent,
)
from mudpane.rendering import DEFAULT_ECHO_COLOR, render_echo, render_fragment

logger = logging.getLogger(__name__)

DEFAULT_SCROLLBACK = 5000


class AssemblerState(Enum):
    IDLE = "idle"
    LINE_OPEN = "line_open"
    DEFERRED_BREAK = "deferred_break"


_NEXT_STATE: dict[type, AssemblerState] = {
    TextEvent: AssemblerState.LINE_OPEN,
    LineBreak: AssemblerState.DEFERRED_BREAK,
}


class Document:
    """Sealed lines plus exactly one open line.

    sealed_total counts every line ever sealed and dropped counts lines
    trimmed by the scrollback limit, so a view can sync incrementally.
    """

    def __init__(self, scrollback: int | None = DEFAULT_SCROLLBACK):
        if scrollback is not None and scrollback < 1:
            raise ValueError(f"scrollback must be at least 1, got {scrollback}")
        self._sealed: list[Text] = []
        self.open_line: Text = Text()
        self.scrollback = scrollback
        self.sealed_total: int = 0
        self.dropped: int = 0
        self.revision: int = 0

    @property
    def sealed(self) -> Sequence[Text]:
        """Sealed lines, oldest first. Read-only view; do not mutate."""
        return self._sealed

    def __len__(self) -> int:
        if not self._sealed and not self.open_line:
            return 0
        return len(self._sealed) + 1

    def lines(self) -> list[Text]:
        """All visual lines, open line last."""
        if not len(self):
            return []
        return [*self._sealed, self.open_line]

    def plain_lines(self) -> list[str]:
        return [line.plain for line in self.lines()]

    def append(self, run: Text) -> None:
        self.open_line.append_text(run)
        self.revision += 1

    def seal(self, next_line: Text | None = None) -> None:
        """Move the open line into the sealed sequence and start a new one."""
        self._sealed.append(self.open_line)
        self.sealed_total += 1
        self.open_line = next_line if next_line is not None else Text()
        self._trim()
        self.revision += 1

    def _trim(self) -> None:
        if self.scrollback is None:
            return
        excess = len(self._sealed) - self.scrollback
        if excess > 0:
            del self._sealed[:excess]
            self.dropped += excess

    def clear(self) -> None:
        self.dropped += len(self._sealed)
        self._sealed.clear()
        self.open_line = Text()
        self.revision += 1


class LineAssembler:
    """Deferred-newline state machine feeding a Document.

    Args:
        palette: ANSI palette for indexed colors (default: process palette).
        on_bell: Called for every Beep effect. Never touches the document.
        scrollback: Max sealed lines retained (None = unbounded).
        echo_color: Color used for locally echoed input.
    """

    def __init__(
        self,
        palette: Sequence[Color] | None = None,
        on_bell: Callable[[], None] | None = None,
        scrollback: int | None = DEFAULT_SCROLLBACK,
        echo_color: str = DEFAULT_ECHO_COLOR,
    ):
        self.palette = palette if palette is not None else mudpane.palette.PALETTE
        self.on_bell = on_bell
        self.echo_color = echo_color
        self.document = Document(scrollback)
        self.state = AssemblerState.IDLE

    @property
    def break_pending(self) -> bool:
        return self.state == AssemblerState.DEFERRED_BREAK

    def _flush_break(self) -> None:
        if self.break_pending:
            self.document.seal()

    def feed(self, event: OutputEvent) -> bool:
        """Apply one event. Returns True if the document changed."""
        if isinstance(event, TextEvent):
            self._flush_break()
            self.document.append(render_fragment(event.fragment, self.palette))
        elif isinstance(event, LineBreak):
            changed = self.break_pending
            self._flush_break()
            self.state = _NEXT_STATE[LineBreak]
            return changed
        elif isinstance(event, EffectEvent):
            if event.effect is Effect.BEEP and self.on_bell is not None:
                self.on_bell()
            return False
        elif isinstance(event, StructuralMarker):
            return False
        else:
            logger.debug("ignoring unrecognized output event %r", event)
            return False
        self.state = _NEXT_STATE[type(event)]
        return True

    def feed_all(self, events: Iterable[OutputEvent]) -> bool:
        changed = False
        for event in events:
            changed = self.feed(event) or changed
        return changed

    def echo_input(self, text: str) -> None:
        """Seal the open line and start a fresh one holding the echo.

        A pending break is absorbed by the seal; a new one is left pending so
        following output starts below the echo.
        """
        if self.state != AssemblerState.IDLE or len(self.document):
            self.document.seal(render_echo(text, self.echo_color))
        else:
            self.document.append(render_echo(text, self.echo_color))
        self.state = AssemblerState.DEFERRED_BREAK

    def clear(self) -> None:
        self.document.clear()
        self.state = AssemblerState.IDLE
