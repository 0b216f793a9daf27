"""Logging helpers used by the marketbase CLI and startup sequence.

Console output goes through Rich on stderr. An optional in-memory "flight
recorder" keeps recent DEBUG records and dumps them to a file when something
goes wrong, so a failed reconciliation pass can be inspected after the fact
without running the whole process at DEBUG verbosity.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import alembic
import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "marketbase"

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records from other libraries with a short ``[library]`` prefix.

    Project records get an empty prefix. The filter never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            # "sqlalchemy.engine.Engine" -> "[sqlalchemy]"
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich console handler attached to the root logger.

    Args:
        level: Minimum level shown on the console. Forced to DEBUG in debug mode.
        debug_mode: Show timestamps, logger names and source locations.
        color: Emit ANSI colors. Mirrors click-extra's ``--color/--no-color``.

    Returns:
        RichHandler: A handler writing to stderr.
    """
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )

    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())

    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the flight recorder: a memory buffer in front of a log file.

    Up to `capacity` records are buffered. The buffer is written to `path` as
    soon as a record at `flush_level` or above arrives, or on close when
    `flush_on_close` is set.

    Args:
        path: File the buffer is flushed to (truncated on open).
        capacity: Number of records kept in memory.
        flush_level: Level that triggers a flush.
        flush_on_close: Also flush when the handler is closed.

    Returns:
        MemoryHandler: The buffering handler, targeting a FileHandler.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(process)d:%(threadName)s] "
            "%(levelname)s %(name)s:%(lineno)d: %(message)s"
        )
    )

    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    flight_recorder: bool,
    flight_capacity: int | None,
    force_flush_fr: bool,
    logger_levels: dict[str, int],
) -> None:
    """Emit a one-line INFO summary plus DEBUG diagnostics about the process.

    Args:
        logger: Logger used for the messages.
        app_version: marketbase version string.
        level: Effective console level.
        handlers: Handlers attached to the root logger.
        log_path: Flight recorder file, if any.
        flight_recorder: Whether the flight recorder is on.
        flight_capacity: Flight recorder buffer size, or None.
        force_flush_fr: Whether the recorder flushes on close.
        logger_levels: Per-logger level overrides.
    """
    logger.info(
        "marketbase %s (console=%s, flight-recorder=%s)",
        app_version,
        logging.getLevelName(level),
        "ON" if flight_recorder else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug("Alembic: %s", alembic.__version__)
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            str(log_path) if log_path else "<none>",
            flight_capacity,
            force_flush_fr,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
