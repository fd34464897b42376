"""Logging bootstrap for a mudpane run.

One log file per world connection, named after the world, so a session's
connect/disconnect history and data-quality warnings can be read back later.
While the TUI owns the terminal, stderr only carries warnings and errors.

// [LAW:single-enforcer] Handler wiring for the "mudpane" logger happens here only.
// [LAW:one-source-of-truth] The resolved log file and level are returned as LoggingRuntime.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "mudpane"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


@dataclass(frozen=True)
class LoggingRuntime:
    """Where and how verbosely this run logs."""

    world: str
    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _level_from_env() -> tuple[str, int]:
    wanted = (os.environ.get("MUDPANE_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(wanted)
    if not isinstance(level, int):
        level = logging.INFO
    return logging.getLevelName(level), level


def _file_stem(world: str) -> str:
    # "mud.example.org:4000" -> "mud-example-org-4000"
    stem = "".join(ch if ch.isalnum() or ch in "-_" else "-" for ch in world)
    return stem.strip("-_") or "world"


def log_path_for(world: str) -> Path:
    """Fresh log file path for world under MUDPANE_LOG_DIR."""
    log_dir = Path(
        os.environ.get("MUDPANE_LOG_DIR") or os.path.expanduser("~/.local/share/mudpane/logs")
    )
    started = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{_file_stem(world)}-{started}-{os.getpid()}.log"


def _stderr_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter("mudpane: %(levelname)s %(message)s"))
    return handler


def _file_handler(level: int, file_path: Path, world: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            f"%(asctime)s %(levelname)-7s [{world}] %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure(world: str = "mudpane") -> LoggingRuntime:
    """Attach stderr and rotating-file handlers to the mudpane logger.

    MUDPANE_LOG_LEVEL sets the file level (default INFO) and MUDPANE_LOG_FILE
    overrides the per-world file name. Only the first call configures; later
    calls return the same runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _level_from_env()
    override = os.environ.get("MUDPANE_LOG_FILE")
    file_path = Path(override) if override else log_path_for(world)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(_stderr_handler())
    logger.addHandler(_file_handler(level, file_path, world))

    # Third-party libraries (textual, asyncio) stay at warning+
    root = logging.getLogger()
    if root.level > logging.WARNING:
        root.setLevel(logging.WARNING)
    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(world, level_name, level, str(file_path))
    logger.debug("logging %s at %s to %s", world, level_name, file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """The active runtime, or None before configure()."""
    return _RUNTIME


def reset() -> None:
    """Detach handlers and forget the runtime. Used by tests."""
    global _RUNTIME
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _RUNTIME = None
