"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin coordinator: the Session owns connection and
//   document state; this app is its SessionView and routes widget events in.
"""

import logging
from collections.abc import Sequence

from rich.color import Color
from rich.text import Text
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Input, Static

from mudpane.assembler import DEFAULT_SCROLLBACK, LineAssembler
from mudpane.backend import MudBackend
from mudpane.rendering import DEFAULT_ECHO_COLOR
from mudpane.session import Session
from mudpane.tui.output_view import OutputView

logger = logging.getLogger(__name__)


class MudpaneApp(App):
    """Terminal client for one world."""

    TITLE = "mudpane"

    CSS = """
    #error {
        height: auto;
        color: $error;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+l", "clear_output", "Clear"),
    ]

    def __init__(
        self,
        backend: MudBackend,
        palette: Sequence[Color] | None = None,
        scrollback: int | None = DEFAULT_SCROLLBACK,
        echo_color: str = DEFAULT_ECHO_COLOR,
        world_name: str = "",
    ):
        super().__init__()
        assembler = LineAssembler(palette, scrollback=scrollback, echo_color=echo_color)
        self.session = Session(backend, assembler, view=self)
        if world_name:
            self.sub_title = world_name

    def compose(self) -> ComposeResult:
        yield Header()
        yield OutputView(self.session.document, id="output")
        yield Footer()
        yield Input(placeholder="", id="input")
        yield Static("", id="error")

    def on_mount(self) -> None:
        self.query_one("#input", Input).focus()
        self.session.start()

    def on_unmount(self) -> None:
        self.session.disconnect()

    async def action_quit(self) -> None:
        self.session.disconnect()
        self.exit()

    def action_clear_output(self) -> None:
        self.session.assembler.clear()
        self.document_changed()

    # ─── Widget events ─────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        self.show_error("")
        self.session.send_input(text)

    def on_output_view_link_clicked(self, message: OutputView.LinkClicked) -> None:
        if not self.session.handle_link_activation(message.payload):
            self.open_url(message.payload)

    # ─── SessionView ───────────────────────────────────────────────────

    def document_changed(self) -> None:
        self.query_one("#output", OutputView).sync()

    def set_pending_input(self, text: str) -> None:
        field = self.query_one("#input", Input)
        field.value = text
        field.cursor_position = len(text)
        field.focus()

    def show_error(self, message: str) -> None:
        self.query_one("#error", Static).update(Text(message))

    def request_attention(self) -> None:
        self.bell()
