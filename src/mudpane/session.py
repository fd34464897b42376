"""Session controller: connection lifecycle and the consumption loop.

One task per session pulls events from the backend strictly in order and
applies each to the LineAssembler before pulling the next. Input submission
and link activation run on the same event loop, so document mutation is
never concurrent and needs no lock.

// [LAW:locality-or-seam] The UI is reached only through SessionView.
// [LAW:single-enforcer] BackendError is caught here and nowhere above.
"""

import asyncio
import logging
from typing import Protocol

import mudpane.links
from mudpane.assembler import LineAssembler
from mudpane.backend import MudBackend
from mudpane.errors import BackendError
from mudpane.links import SendTo

logger = logging.getLogger(__name__)

CRLF = "\r\n"


class SessionView(Protocol):
    """What the session needs from the visible surface."""

    def document_changed(self) -> None: ...

    def set_pending_input(self, text: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def request_attention(self) -> None: ...


class _NullView:
    def document_changed(self) -> None:
        pass

    def set_pending_input(self, text: str) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def request_attention(self) -> None:
        pass


class Session:
    """Owns one backend connection and the document it feeds."""

    def __init__(
        self,
        backend: MudBackend,
        assembler: LineAssembler | None = None,
        view: SessionView | None = None,
    ):
        self.backend = backend
        self.view: SessionView = view if view is not None else _NullView()
        self.assembler = assembler if assembler is not None else LineAssembler()
        self.assembler.on_bell = self._bell
        self.pending_input = ""
        self.last_error: str | None = None
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def document(self):
        return self.assembler.document

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def closed(self) -> bool:
        return self._closed

    def _report(self, message: str) -> None:
        self.last_error = message
        self.view.show_error(message)

    def _bell(self) -> None:
        self.view.request_attention()

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def start(self) -> asyncio.Task:
        """Connect and consume in a background task on the running loop.

        A disconnected session cannot be restarted.
        """
        if self._closed:
            raise RuntimeError("session is closed")
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="mudpane-session")
        return self._task

    async def connect(self) -> bool:
        try:
            await self.backend.connect()
        except BackendError as exc:
            logger.error("connect failed: %s", exc)
            self._report(str(exc))
            return False
        return True

    async def run(self) -> None:
        """Connect, then apply events until the stream ends or fails."""
        if not await self.connect():
            return
        try:
            async for event in self.backend.events():
                if self._closed:
                    break
                if self.assembler.feed(event):
                    self.view.document_changed()
        except BackendError as exc:
            logger.error("output stream failed: %s", exc)
            self._report(str(exc))
        else:
            logger.info("output stream ended")

    def disconnect(self) -> bool:
        """Stop the loop and close the backend. Idempotent."""
        if self._closed:
            return False
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.backend.disconnect()
        return True

    # ─── Outbound ──────────────────────────────────────────────────────

    def send_input(self, text: str) -> bool:
        """Echo text locally and hand text + CRLF to the backend.

        A send failure is reported but leaves the consumption loop running.
        """
        self.assembler.echo_input(text)
        self.view.document_changed()
        try:
            self.backend.send_raw((text + CRLF).encode("utf-8"))
        except BackendError as exc:
            logger.warning("send failed: %s", exc)
            self._report(str(exc))
            return False
        return True

    def handle_link_activation(self, payload: str) -> bool:
        """Route a clicked link. Returns False for non-internal links."""
        decoded = mudpane.links.decode(payload)
        if decoded is None:
            logger.debug("ignoring external link %r", payload)
            return False
        if decoded.sendto is SendTo.INPUT:
            self.pending_input = decoded.text
            self.view.set_pending_input(decoded.text)
            return True
        self.send_input(decoded.text)
        return True
