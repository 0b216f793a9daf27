"""Integration tests for the SQLAlchemy-backed Unit of Work adapter.

Verifies commit and rollback behavior of SqlAlchemyUnitOfWork and that hooks
registered on the unit of work reach every store it opens.
"""

import pytest

from marketbase.adapters.unit_of_work import SqlAlchemyUnitOfWork
from marketbase.domain.schema import FieldKind
from marketbase.interfaces.record_store import Field

FIELDS = [Field("name", FieldKind.TEXT, required=True)]


def test_uow_commit_persists_collection(sqlite_engine_memory):
    """Committed changes are visible from a new context."""
    uow = SqlAlchemyUnitOfWork(sqlite_engine_memory)
    with uow:
        created = uow.store.create_collection("shops", FIELDS)
        uow.commit()

    with uow:
        assert uow.store.find_collection("shops") == created


def test_uow_without_commit_discards_changes(sqlite_engine_memory):
    """Leaving the context without commit rolls back."""
    uow = SqlAlchemyUnitOfWork(sqlite_engine_memory)
    with uow:
        uow.store.create_collection("shops", FIELDS)

    with uow:
        assert uow.store.find_collection("shops") is None


def test_rolls_back_on_error(sqlite_engine_memory):
    """An exception inside the context triggers a rollback."""

    class MyException(Exception):
        """Custom exception for testing."""

    uow = SqlAlchemyUnitOfWork(sqlite_engine_memory)
    with pytest.raises(MyException):
        with uow:
            uow.store.create_collection("shops", FIELDS)
            raise MyException()

    with uow:
        assert uow.store.find_collection("shops") is None


def test_partial_commits_survive_a_later_failure(sqlite_engine_memory):
    """Work committed before a failure stays; only the tail is rolled back."""
    uow = SqlAlchemyUnitOfWork(sqlite_engine_memory)
    with pytest.raises(RuntimeError):
        with uow:
            uow.store.create_collection("shops", FIELDS)
            uow.commit()
            uow.store.create_collection("products", FIELDS)
            raise RuntimeError("boom")

    with uow:
        assert uow.store.find_collection("shops") is not None
        assert uow.store.find_collection("products") is None


def test_hooks_apply_to_every_context(sqlite_engine_memory):
    """Hooks registered once fire in later transactions."""
    uow = SqlAlchemyUnitOfWork(sqlite_engine_memory)
    with uow:
        uow.store.create_collection("shops", FIELDS)
        uow.commit()

    uow.hooks.on_before_create("shops", lambda store, c, data: data.update(name="hooked"))

    with uow:
        record = uow.store.create_record("shops", {"name": "Corner"})
        uow.commit()

    with uow:
        assert uow.store.require_record("shops", record.id).get("name") == "hooked"
