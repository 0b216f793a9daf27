"""SQLAlchemy-backed Unit of Work for MARKETBASE.

Provides a context-managed UnitOfWork using a SQLAlchemy Connection and the
SqlAlchemyRecordStore. Hooks registered on `uow.hooks` apply to the store of
every context opened afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketbase.adapters.id_generators import ULIDGenerator
from marketbase.adapters.record_store.sqlalchemy_store import SqlAlchemyRecordStore
from marketbase.interfaces.record_store import RecordHooks
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from marketbase.interfaces.id_generator import IdGenerator


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy-backed Unit of Work."""

    def __init__(self, engine: Engine, id_generator: IdGenerator | None = None):
        self.engine = engine
        self.hooks = RecordHooks()
        self._ids = id_generator or ULIDGenerator()
        self.connection: Connection

    def __enter__(self):
        self.connection = self.engine.connect()
        self.store = SqlAlchemyRecordStore(
            self.connection, self._ids, hooks=self.hooks
        )
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.connection.close()

    def commit(self):
        self.connection.commit()

    def rollback(self):
        self.connection.rollback()
