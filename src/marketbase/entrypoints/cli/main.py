"""marketbase CLI entry point.

Defines the top-level ``marketbase`` command (via Click-Extra) and registers
the subcommand groups.

Available commands
- ``marketbase db``: forward-only management of the record store tables.
- ``marketbase startup``: the full startup sequence.
- ``marketbase schema``: reconcile, repair, import or show the schema.
- ``marketbase admin ensure``: first administrator bootstrap.
- ``marketbase sale create``: record a sale with computed commissions.

Examples
    $ marketbase --version
    $ marketbase db upgrade --force
    $ marketbase -v startup
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from marketbase import __version__
from marketbase.bootstrap import startup as run_startup
from marketbase.logging import (
    config_console_handler,
    config_flight_recorder,
    log_startup,
)

from .admin import admin as admin_group
from .db import db as db_group
from .helpers import cli_errors, load_container, success
from .helpers.log_level_parser import parse_log_level
from .sale import sale as sale_group
from .schema import schema as schema_group

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """marketbase command-line interface.

    marketbase prepares the record store of a small marketplace: it keeps the
    shops, products, affiliates and sales collections in the expected shape,
    creates the first administrator, and computes platform fees and affiliate
    commissions when sales are recorded.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (tracebacks with locals, logger paths).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file (overrides default flight recorder path).",
    default=Path(user_log_dir("marketbase", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="MARKETBASE_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="MARKETBASE_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Enable the in-memory flight recorder. Keeps the last N log records "
        "at DEBUG granularity (unaffected by -v/-q) and writes them to "
        "--log-path when a WARNING/ERROR occurs, or on clean exit if "
        "--force-flush is set."
    ),
    default=True,
    envvar="MARKETBASE_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help="Force-flush the flight recorder buffer to --log-path on program exit.",
    default=False,
    show_default=True,
    envvar="MARKETBASE_FORCE_FLUSH_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). Applies to both "
        "console and flight recorder. Repeatable (e.g. -L sqlalchemy=INFO "
        "-L marketbase.service_layer=DEBUG) or via MARKETBASE_LOGGER_LEVELS."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING"),
    show_default=True,
    envvar="MARKETBASE_LOGGER_LEVELS",
    show_envvar=True,
)
@clickx.pass_context
def marketbase(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """marketbase command-line interface."""

    # 0) compute effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) configure console handler
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    )

    # 2) configure flight recorder
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # 3) configure root logger; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) per-logger levels
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


@marketbase.command()
def startup() -> None:
    """Run the startup sequence: admin bootstrap, schema, commission hook."""
    container = load_container()
    with cli_errors():
        result = run_startup(container)

    if result.admin_created:
        success("Administrator created")
    if result.schema is not None:
        success("Schema ready")
    success("Startup complete")


marketbase.add_command(db_group)
marketbase.add_command(schema_group)
marketbase.add_command(admin_group)
marketbase.add_command(sale_group)
