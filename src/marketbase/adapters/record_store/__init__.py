"""Record store adapters: in-memory and SQLAlchemy-backed."""

from .memory import InMemoryRecordData, InMemoryRecordStore
from .sqlalchemy_store import SqlAlchemyRecordStore, seed_system_collections
from .system import system_collections

__all__ = [
    "InMemoryRecordData",
    "InMemoryRecordStore",
    "SqlAlchemyRecordStore",
    "seed_system_collections",
    "system_collections",
]
