"""Application wiring for CLI commands.

Commands that touch the record store build their container through
`load_container` and run inside `cli_errors`, so that configuration and store
errors end up as a readable ``Error: ...`` line rather than a traceback.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import click

from marketbase import config
from marketbase.adapters.schema_file import SchemaFileError
from marketbase.bootstrap import AppContainer, bootstrap
from marketbase.domain.errors import DomainError
from marketbase.interfaces.record_store import RecordStoreError

MISSING_DB_URL_MSG = (
    "MARKETBASE_DB_URL is not set.\n\n"
    "Set it before running this command, e.g.:\n"
    "  export MARKETBASE_DB_URL='sqlite:///marketbase.db'\n"
    "then create the tables with 'marketbase db upgrade'."
)

HANDLED_ERRORS = (
    config.ConfigError,
    DomainError,
    RecordStoreError,
    SchemaFileError,
    ValueError,
)


def load_container() -> AppContainer:
    """Bootstrap the application from the environment.

    Raises:
        click.ClickException: If the database URL is not configured.
    """
    try:
        return bootstrap()
    except config.DatabaseUrlNotSetError as e:
        raise click.ClickException(MISSING_DB_URL_MSG) from e


@contextlib.contextmanager
def cli_errors() -> Iterator[None]:
    """Translate expected application errors into `click.ClickException`."""
    try:
        yield
    except HANDLED_ERRORS as e:
        raise click.ClickException(str(e)) from e
