"""Logging setup for the dapr-appserver command line.

The library itself only creates module loggers; handlers are attached here,
by the CLI, and nowhere else.

Two handlers are used:

- a Rich console handler on stderr, whose level follows -v/-q;
- an optional "flight recorder": a `MemoryHandler` that keeps the most recent
  records at DEBUG and writes them to a file when a WARNING or worse is
  logged (or on exit, if asked to).

Records from other libraries (aiohttp's access log, grpc) are tagged with a
short `[name]` prefix on the console so they stand out from server messages.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from logging.handlers import MemoryHandler
from typing import TYPE_CHECKING

import aiohttp
import grpc
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from pathlib import Path

    from dapr_appserver.config import ServerSettings

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "dapr_appserver"

CONSOLE_FORMAT = "%(prefix)s %(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s %(name)s: %(message)s"
RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] %(levelname)s "
    "%(name)s:%(lineno)d: %(message)s"
)


class LibraryPrefixFilter(logging.Filter):
    """Tag records from outside the project with a `[library]` prefix.

    Sets `record.prefix` to e.g. `"[aiohttp]"` for `aiohttp.access` and to an
    empty string for project loggers. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def console_handler(
    level: int = logging.WARNING, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Return a Rich handler writing to stderr.

    In debug mode the level is forced to DEBUG and records show their
    timestamp, logger name and source location.
    """
    console = Console(color_system="auto" if color else None, stderr=True)
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(DEBUG_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handler.addFilter(LibraryPrefixFilter())
    return handler


def flight_recorder(
    path: Path, capacity: int = 2000, flush_on_close: bool = False
) -> MemoryHandler:
    """Return a memory handler that dumps its buffer to `path` on WARNING.

    The target file is opened lazily, so nothing is created until the buffer
    is first flushed.
    """
    target = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    target.setLevel(logging.DEBUG)
    target.setFormatter(logging.Formatter(RECORDER_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=logging.WARNING,
        target=target,
        flushOnClose=flush_on_close,
    )


def configure_logging(
    handlers: list[logging.Handler], logger_levels: dict[str, int]
) -> None:
    """Install `handlers` on the root logger and apply per-logger levels.

    The root logger passes everything through; each handler filters by its
    own level. Any previous configuration is replaced.
    """
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, level in logger_levels.items():
        logging.getLogger(name).setLevel(level)


def log_startup(
    logger: logging.Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    logger_levels: dict[str, int],
) -> None:
    """Log a one-line summary at INFO and environment diagnostics at DEBUG."""
    recorder = any(isinstance(h, MemoryHandler) for h in handlers)
    logger.info(
        "dapr-appserver %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        log_path if recorder else "OFF",
    )
    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("aiohttp: %s, grpcio: %s", aiohttp.__version__, grpc.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    logger.debug(
        "Logger levels: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()},
    )


def log_settings(logger: logging.Logger, settings: ServerSettings) -> None:
    """Log the settings a server is about to be built from."""
    logger.info(
        "Serving %s on %s:%s for sidecar %s:%s",
        settings.communication_protocol.name,
        settings.server_host,
        settings.server_port,
        settings.dapr_host,
        settings.dapr_port,
    )
    logger.debug("Client options: %s", settings.client_options)
