"""Scrollable view of the assembled document.

Line API widget: each document line is rendered once into wrapped Strips at
the current width. Sealed lines are cached and synced incrementally from the
Document's counters; the open line is re-rendered on every change.

Action-link runs carry segment metadata (see mudpane.rendering). A click on
one posts LinkClicked; hovering shows the run's tooltip.
"""

from rich.segment import Segment
from rich.text import Text
from textual.geometry import Size
from textual.message import Message
from textual.scroll_view import ScrollView
from textual.strip import Strip

import mudpane.rendering
from mudpane.assembler import Document


class OutputView(ScrollView, can_focus=True):
    """Virtual-rendering document display."""

    DEFAULT_CSS = """
    OutputView {
        height: 1fr;
        overflow-y: scroll;
        overflow-x: hidden;
        border: solid $accent;
        &:focus {
            background-tint: $foreground 5%;
        }
    }
    """

    class LinkClicked(Message):
        """An action-link run was clicked."""

        def __init__(self, payload: str) -> None:
            self.payload = payload
            super().__init__()

    def __init__(self, document: Document, *, id: str | None = None):
        super().__init__(id=id)
        self.document = document
        self._sealed_strips: list[Strip] = []
        self._sealed_counts: list[int] = []  # strips per sealed line
        self._open_strips: list[Strip] = []
        self._synced_total = 0
        self._synced_dropped = 0
        self._render_width = 0

    # ─── Rendering ─────────────────────────────────────────────────────

    @property
    def _content_width(self) -> int:
        return self.scrollable_content_region.width or self.size.width or 80

    def _render_text(self, line: Text) -> list[Strip]:
        console = self.app.console
        options = console.options.update_width(self._render_width)
        lines = list(Segment.split_lines(console.render(line, options)))
        if not lines:
            return [Strip.blank(0)]
        return list(Strip.from_lines(lines))

    def _rebuild(self) -> None:
        """Re-render every line (width change or lost sync)."""
        self._render_width = self._content_width
        self._sealed_strips = []
        self._sealed_counts = []
        for line in self.document.sealed:
            strips = self._render_text(line)
            self._sealed_strips.extend(strips)
            self._sealed_counts.append(len(strips))
        self._synced_total = self.document.sealed_total
        self._synced_dropped = self.document.dropped

    def _sync_sealed(self) -> None:
        doc = self.document
        dropped = doc.dropped - self._synced_dropped
        if dropped:
            removed = sum(self._sealed_counts[:dropped])
            del self._sealed_counts[:dropped]
            del self._sealed_strips[:removed]
        new = doc.sealed_total - self._synced_total
        sealed = doc.sealed
        if new:
            for line in sealed[max(0, len(sealed) - new):]:
                strips = self._render_text(line)
                self._sealed_strips.extend(strips)
                self._sealed_counts.append(len(strips))
        self._synced_total = doc.sealed_total
        self._synced_dropped = doc.dropped
        if len(self._sealed_counts) != len(sealed):
            self._rebuild()

    def sync(self) -> None:
        """Bring strips up to date with the document and refresh."""
        if not self.is_mounted:
            return
        following = self.scroll_y >= self.max_scroll_y
        if self._content_width != self._render_width:
            self._rebuild()
        else:
            self._sync_sealed()
        self._open_strips = (
            self._render_text(self.document.open_line) if len(self.document) else []
        )
        self.virtual_size = Size(self._render_width, self.line_count)
        self.refresh()
        if following:
            self.scroll_end(animate=False)

    @property
    def line_count(self) -> int:
        return len(self._sealed_strips) + len(self._open_strips)

    def strip_at(self, y: int) -> Strip | None:
        if y < len(self._sealed_strips):
            return self._sealed_strips[y]
        y -= len(self._sealed_strips)
        if y < len(self._open_strips):
            return self._open_strips[y]
        return None

    def plain_lines(self) -> list[str]:
        """Rendered text per visual row (wrapped), for inspection."""
        return [
            "".join(seg.text for seg in strip).rstrip()
            for strip in (*self._sealed_strips, *self._open_strips)
        ]

    def render_line(self, y: int) -> Strip:
        """Line API: render a single line at virtual position y."""
        scroll_x, scroll_y = self.scroll_offset
        width = self._content_width
        strip = self.strip_at(scroll_y + y)
        if strip is None:
            return Strip.blank(width, self.rich_style)
        return strip.crop_extend(scroll_x, scroll_x + width, self.rich_style).apply_style(
            self.rich_style
        )

    # ─── Events ────────────────────────────────────────────────────────

    def on_mount(self) -> None:
        self.sync()

    def on_resize(self) -> None:
        self.sync()

    def on_click(self, event) -> None:
        payload = event.style.meta.get(mudpane.rendering.META_LINK)
        if payload is not None:
            event.stop()
            self.post_message(self.LinkClicked(payload))

    def on_mouse_move(self, event) -> None:
        tooltip = event.style.meta.get(mudpane.rendering.META_TOOLTIP)
        if tooltip != self.tooltip:
            self.tooltip = tooltip
