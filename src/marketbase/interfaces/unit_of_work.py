"""Unit of Work interface for MARKETBASE.

Defines the AbstractUnitOfWork contract: a context-managed unit of work
exposing a RecordStore and abstract commit/rollback methods.
"""

from __future__ import annotations

import abc

from .record_store import RecordHooks, RecordStore


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work.

    `hooks` outlives any single context: stores opened by the unit of work
    share it, so hooks registered once at startup apply to every transaction.
    """

    store: RecordStore
    hooks: RecordHooks

    def __enter__(self) -> AbstractUnitOfWork:
        """Enter the unit of work context and return the unit.

        Implementations may acquire transactional resources here.
        """
        return self

    def __exit__(self, *args):
        """Exit the unit of work context.

        Default behavior is to roll back whatever was not committed.
        """
        self.rollback()

    @abc.abstractmethod
    def commit(self):
        """Persist changes made so far."""

    @abc.abstractmethod
    def rollback(self):
        """Revert uncommitted changes."""
