"""Database engine factory and helpers.

Every Engine used by marketbase comes from `make_engine` so that connections
are configured the same way everywhere:

- **SQLite**: PRAGMAs enforce foreign keys (needed for records to disappear
  with their collection), enable WAL, and tune durability/temporary storage.
- **Other backends**: used as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Engine

SQLITE_BACKEND = "sqlite"


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string points at SQLite."""
    return make_url(str(url)).get_backend_name() == SQLITE_BACKEND


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    For SQLite the following PRAGMAs run on every new connection:
        - ``foreign_keys=ON`` (records cascade with their collection)
        - ``journal_mode=WAL`` (readers don't block the writer)
        - ``synchronous=NORMAL``
        - ``temp_store=MEMORY``

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """
    engine = create_engine(url, echo=echo)

    if is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute("PRAGMA temp_store=MEMORY;")
            cur.close()

    return engine
