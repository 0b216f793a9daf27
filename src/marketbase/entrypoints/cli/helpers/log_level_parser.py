"""Helpers for parsing logger-level CLI options.

Parses options of the form NAME=LEVEL, given repeatedly or as one comma/space
separated list (as from the ``MARKETBASE_LOGGER_LEVELS`` variable), into
numeric logging levels.
"""

import logging
import re

import click

DEFAULT_LIB_LEVELS = {"sqlalchemy": logging.WARNING, "alembic": logging.WARNING}


def _normalize_items(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """Flatten the option value into non-empty NAME=LEVEL items."""
    values = value if isinstance(value, (tuple, list)) else [value]
    items: list[str] = []
    for v in values:
        items.extend(s for s in re.split(r"[,\s]+", v) if s)
    return items


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...],
) -> dict[str, int]:
    """Click callback that parses NAME=LEVEL pairs into a name->level dict.

    Overrides are applied on top of DEFAULT_LIB_LEVELS.

    Raises:
        click.BadParameter: If an item is not NAME=LEVEL or LEVEL is unknown.
    """
    levels = dict(DEFAULT_LIB_LEVELS)
    for item in _normalize_items(value):
        try:
            name, level_str = item.split("=", 1)
        except ValueError as e:
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}") from e
        lvl = logging.getLevelName(level_str.strip().upper())
        if not isinstance(lvl, int):
            raise click.BadParameter(f"Invalid log level: {level_str}")
        levels[name.strip()] = lvl
    return levels
