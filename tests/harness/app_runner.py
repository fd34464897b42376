"""App lifecycle management for Textual in-process tests.

Creates MudpaneApp instances wired to a ScriptedBackend and manages the
run_test() lifecycle. Every call builds a fresh backend, session and app.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from textual.pilot import Pilot

from mudpane.backend import ScriptedBackend
from mudpane.palette import default_palette
from mudpane.tui.app import MudpaneApp


async def settle(pilot: Pilot, backend: ScriptedBackend, rounds: int = 20) -> None:
    """Pause until the session has connected and drained backend's queue."""
    for _ in range(rounds):
        await pilot.pause()
        attempted = backend.is_connected or backend.connect_error is not None
        if attempted and not backend.pending:
            break
    await pilot.pause()


@asynccontextmanager
async def run_app(
    *,
    backend: ScriptedBackend | None = None,
    size: tuple[int, int] = (100, 30),
    scrollback: int | None = 5000,
    message_hook: Callable | None = None,
) -> AsyncIterator[tuple[Pilot, MudpaneApp]]:
    """Create and run a MudpaneApp in test mode.

    Yields (pilot, app) once the scripted output has been consumed. The
    default backend holds its stream open so tests can push() more events.

    Args:
        backend: Scripted backend to drive (default: empty, held open).
        size: Terminal dimensions (width, height).
        scrollback: Sealed-line limit passed to the assembler.
        message_hook: Optional Textual message hook for MessageCapture.
    """
    # [LAW:no-shared-mutable-globals] Fresh state for every test
    if backend is None:
        backend = ScriptedBackend(hold_open=True)
    app = MudpaneApp(backend, palette=default_palette(), scrollback=scrollback)

    async with app.run_test(size=size, message_hook=message_hook) as pilot:
        await settle(pilot, backend)
        yield pilot, app
