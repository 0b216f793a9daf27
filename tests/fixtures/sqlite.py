"""sqlite-specific fixtures"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from alembic import command
from sqlalchemy.engine import URL

from marketbase import config
from marketbase.adapters.db.engine import make_engine
from marketbase.adapters.db.metadata import metadata
from marketbase.adapters.record_store import seed_system_collections

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine_memory() -> Iterator[Engine]:
    """In-memory SQLite engine for unit-style tests.

    Uses `make_engine()` so SQLite PRAGMAs are applied. Tables come from
    `metadata.create_all()`; the system collections are seeded explicitly since
    no migration runs.

    Yields:
        Engine: SQLAlchemy engine bound to an in-memory DB.
    """
    test_engine = make_engine("sqlite+pysqlite:///:memory:")
    metadata.create_all(test_engine)
    seed_system_collections(test_engine)
    yield test_engine
    metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a fresh, file-backed SQLite database migrated to Alembic head."""
    url = str(URL.create("sqlite+pysqlite", database=str(tmp_path / "test.db")))
    command.upgrade(config.build_alembic_config(url), "head")
    return url


@pytest.fixture
def sqlite_engine_file(sqlite_url: str) -> Iterator[Engine]:
    """File-backed SQLite engine migrated via Alembic (per test).

    A temp *file* (not :memory:) is used so Alembic's schema changes persist
    across connections. Each test gets its own DB file; nothing is downgraded
    on teardown.

    Yields:
        Engine: SQLAlchemy engine pointing at a temp file DB.
    """
    test_engine = make_engine(sqlite_url)
    try:
        yield test_engine
    finally:
        test_engine.dispose()
