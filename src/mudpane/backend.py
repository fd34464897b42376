"""Backend contracts and bridges.

The session consumes a backend through two contracts: a connection handle
(connect / send_raw / disconnect) and an asynchronous, cancellable source of
OutputEvents. Wire-level decoding (telnet, compression, markup) belongs to
the backend; the bridges here only frame bytes into text runs and breaks.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Protocol, runtime_checkable

from mudpane.errors import BackendError, ConnectError, SendError
from mudpane.event_types import (
    BELL,
    LINE_BREAK,
    OutputEvent,
    TextEvent,
    TextFragment,
)

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
READ_SIZE = 4096

# Marks end-of-stream on internal queues
_END = object()


@runtime_checkable
class MudBackend(Protocol):
    """Connection handle plus fragment source."""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None:
        """Establish the connection. Raises ConnectError on failure."""
        ...

    def send_raw(self, data: bytes) -> None:
        """Queue bytes for the server. Raises SendError on failure."""
        ...

    def disconnect(self) -> bool:
        """Close the connection. Returns False if it was not open."""
        ...

    def events(self) -> AsyncIterator[OutputEvent]:
        """Yield output events until the stream closes.

        Ending normally means the server closed the connection; a
        BackendError means it failed.
        """
        ...


# ─── Byte framing ─────────────────────────────────────────────────────────────


def _incomplete_utf8_tail(data: bytes) -> int:
    """Length of a truncated UTF-8 sequence at the end of data (0-3)."""
    for back in range(1, min(4, len(data)) + 1):
        byte = data[-back]
        if byte & 0xC0 == 0x80:
            continue  # continuation byte, keep looking for the lead
        if byte >= 0xF0:
            need = 4
        elif byte >= 0xE0:
            need = 3
        elif byte >= 0xC0:
            need = 2
        else:
            return 0
        return back if back < need else 0
    return 0


class ByteFramer:
    """Split a raw byte stream into text runs, line breaks and bells.

    A run never ends inside a multi-byte UTF-8 sequence; incomplete tails are
    held until the next chunk. A carriage return directly before a newline is
    dropped.
    """

    def __init__(self):
        self._pending = b""

    def feed(self, data: bytes) -> list[OutputEvent]:
        data = self._pending + data
        tail = _incomplete_utf8_tail(data)
        if not tail and data.endswith(b"\r"):
            tail = 1  # may be the first half of CRLF
        if tail:
            data, self._pending = data[:-tail], data[-tail:]
        else:
            self._pending = b""
        return self._frame(data)

    def flush(self) -> list[OutputEvent]:
        data, self._pending = self._pending, b""
        return self._frame(data)

    @staticmethod
    def _frame(data: bytes) -> list[OutputEvent]:
        events: list[OutputEvent] = []
        lines = data.split(b"\n")
        for i, line in enumerate(lines):
            if i:
                events.append(LINE_BREAK)
            if i < len(lines) - 1 and line.endswith(b"\r"):
                line = line[:-1]
            for j, run in enumerate(line.split(b"\x07")):
                if j:
                    events.append(BELL)
                if run:
                    events.append(TextEvent(TextFragment(run)))
        return events


# ─── TCP bridge ───────────────────────────────────────────────────────────────


class StreamBridge:
    """asyncio TCP connection framed into output events.

    A reader task pushes events onto an unbounded queue; events() drains it.
    """

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task | None = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._error: Exception | None = None

    def __repr__(self) -> str:
        return f"StreamBridge({self.host!r}, {self.port})"

    @property
    def is_connected(self) -> bool:
        return self._reader_task is not None and not self._reader_task.done()

    async def connect(self) -> None:
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ConnectError(
                f"timed out connecting to {self.host}:{self.port}"
            ) from exc
        except OSError as exc:
            raise ConnectError(
                f"could not connect to {self.host}:{self.port}: {exc.strerror or exc}"
            ) from exc
        logger.info("connected to %s:%d", self.host, self.port)
        self._writer = writer
        self._error = None
        self._reader_task = asyncio.create_task(
            self._read_loop(reader), name=f"mudpane-reader-{self.host}"
        )

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        framer = ByteFramer()
        try:
            while True:
                data = await reader.read(READ_SIZE)
                if not data:
                    break
                for event in framer.feed(data):
                    self._queue.put_nowait(event)
            for event in framer.flush():
                self._queue.put_nowait(event)
            logger.info("server closed connection")
        except OSError as exc:
            logger.error("read failed: %s", exc)
            self._error = exc
        finally:
            self._queue.put_nowait(_END)

    def send_raw(self, data: bytes) -> None:
        writer = self._writer
        if writer is None or writer.is_closing():
            raise SendError("not connected")
        try:
            writer.write(data)
        except (OSError, RuntimeError) as exc:
            raise SendError(f"send failed: {exc}") from exc

    def disconnect(self) -> bool:
        task, self._reader_task = self._reader_task, None
        was_connected = task is not None and not task.done()
        if was_connected:
            task.cancel()
            self._queue.put_nowait(_END)
        if self._writer is not None:
            self._writer.close()
            self._writer = None
        if was_connected:
            logger.info("disconnected from %s:%d", self.host, self.port)
        return was_connected

    async def events(self) -> AsyncIterator[OutputEvent]:
        while True:
            item = await self._queue.get()
            if item is _END:
                if self._error is not None:
                    raise BackendError(f"connection lost: {self._error}") from self._error
                return
            yield item


# ─── Scripted backend ─────────────────────────────────────────────────────────


class ScriptedBackend:
    """In-process backend replaying a fixed event script.

    Everything sent is recorded in `sent`. An optional responder maps each
    submitted line (CRLF stripped) to more events. With hold_open the stream
    stays open after the script until disconnect().
    """

    def __init__(
        self,
        script: Iterable[OutputEvent] = (),
        responder: Callable[[str], Iterable[OutputEvent]] | None = None,
        hold_open: bool = False,
        connect_error: str | None = None,
    ):
        self.script = list(script)
        self.responder = responder
        self.hold_open = hold_open
        self.connect_error = connect_error
        self.sent: list[bytes] = []
        self._queue: asyncio.Queue = asyncio.Queue()
        self._connected = False
        # The script is the start of the stream; anything pushed later follows it
        for event in self.script:
            self._queue.put_nowait(event)

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def pending(self) -> int:
        """Events queued but not yet consumed."""
        return self._queue.qsize()

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise ConnectError(self.connect_error)
        self._connected = True
        if not self.hold_open:
            self._queue.put_nowait(_END)

    def push(self, *events: OutputEvent) -> None:
        """Inject events as if the server had sent them."""
        for event in events:
            self._queue.put_nowait(event)

    def close_stream(self) -> None:
        self._queue.put_nowait(_END)

    def send_raw(self, data: bytes) -> None:
        if not self._connected:
            raise SendError("not connected")
        self.sent.append(data)
        if self.responder is not None:
            line = data.decode("utf-8", errors="replace").rstrip("\r\n")
            self.push(*self.responder(line))

    def disconnect(self) -> bool:
        was_connected = self._connected
        self._connected = False
        if was_connected:
            self._queue.put_nowait(_END)
        return was_connected

    async def events(self) -> AsyncIterator[OutputEvent]:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            yield item
