"""Pytest fixtures for RecordStore contract tests."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from marketbase.adapters.id_generators import SimpleIdGenerator
from marketbase.adapters.record_store import InMemoryRecordStore, SqlAlchemyRecordStore
from marketbase.domain.schema import AccessRules, FieldKind
from marketbase.interfaces.record_store import Collection, Field, RecordStore


@pytest.fixture(params=["memory", "sqlite", "postgres"])
def store(request: pytest.FixtureRequest) -> Iterable[RecordStore]:
    """Return a fresh record store for the requested backend.

    Current params:
      - `"memory"` → `InMemoryRecordStore` (non-durable, in-memory)
      - `"sqlite"` → `SqlAlchemyRecordStore` on in-memory SQLite
      - `"postgres"` → `SqlAlchemyRecordStore` on a Testcontainers Postgres
        (skipped without Docker)

    SQL-backed stores run inside one transaction per test.
    """
    match request.param:
        case "memory":
            yield InMemoryRecordStore(SimpleIdGenerator())
        case "sqlite" | "postgres":
            engine = request.getfixturevalue(
                "sqlite_engine_memory" if request.param == "sqlite" else "postgres_engine"
            )
            with engine.begin() as connection:
                yield SqlAlchemyRecordStore(connection, SimpleIdGenerator())
        case _:
            raise ValueError(f"unknown store type: {request.param}")


@pytest.fixture
def make_collection(store: RecordStore) -> Callable[..., Collection]:
    """Factory for a small collection with a text, a number and a file field.

    Example:
        ``make_collection("shops", required=("name",))``
    """

    def _make(
        name: str = "shops",
        *,
        required: tuple[str, ...] = (),
        extra: tuple[Field, ...] = (),
        rules: AccessRules | None = None,
    ) -> Collection:
        fields = (
            Field("name", FieldKind.TEXT, required="name" in required),
            Field(
                "commission_rate",
                FieldKind.NUMBER,
                required="commission_rate" in required,
            ),
            Field(
                "logo",
                FieldKind.FILE,
                max_select=1,
                max_size=5_242_880,
                mime_types=("image/png", "image/webp"),
            ),
        )
        return store.create_collection(name, fields + extra, rules)

    return _make
