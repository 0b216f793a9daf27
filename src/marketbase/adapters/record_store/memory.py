"""In-memory record store implementation.

All collections and records live in memory and are lost when the instance is
discarded. Use for unit tests, prototyping, or scenarios where durability is
not required.

This implementation passes all contract tests for the RecordStore interface.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from marketbase.adapters.id_generators import ULIDGenerator
from marketbase.domain.schema import AccessRules
from marketbase.interfaces.id_generator import IdGenerator
from marketbase.interfaces.record_store import (
    Collection,
    CollectionNotFoundError,
    DuplicateCollectionError,
    Field,
    Record,
    RecordHooks,
    RecordStore,
    SystemCollectionError,
    coerce_numbers,
)

from .system import system_collections


@dataclass(slots=True)
class InMemoryRecordData:
    """Backing data for `InMemoryRecordStore`.

    Several stores may share one instance to emulate separate connections to
    the same database.
    """

    # keyed by collection id
    collections: dict[str, Collection] = field(default_factory=dict)

    # keyed by collection id, then record id
    records: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)


class InMemoryRecordStore(RecordStore):
    """In-memory RecordStore for testing and non-durable use cases."""

    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        *,
        data: InMemoryRecordData | None = None,
        hooks: RecordHooks | None = None,
    ) -> None:
        self._ids = id_generator or ULIDGenerator()
        self._data = data if data is not None else InMemoryRecordData()
        self.hooks = hooks if hooks is not None else RecordHooks()
        for system in system_collections():
            if system.id not in self._data.collections:
                self._data.collections[system.id] = system
                self._data.records[system.id] = {}

    # --------------------------------------------------------------------- #
    # Collections
    # --------------------------------------------------------------------- #

    def find_collection(self, name_or_id: str) -> Collection | None:
        if name_or_id in self._data.collections:
            return self._data.collections[name_or_id]
        for collection in self._data.collections.values():
            if collection.name == name_or_id:
                return collection
        return None

    def list_collections(self) -> list[Collection]:
        return list(self._data.collections.values())

    def create_collection(
        self,
        name: str,
        fields: Sequence[Field],
        rules: AccessRules | None = None,
    ) -> Collection:
        if self.find_collection(name) is not None:
            raise DuplicateCollectionError(name)
        collection = Collection(
            id=self._ids.new_id(),
            name=name,
            fields=tuple(fields),
            rules=rules or AccessRules(),
        )
        self._data.collections[collection.id] = collection
        self._data.records[collection.id] = {}
        return collection

    def update_collection(self, collection: Collection) -> Collection:
        current = self._data.collections.get(collection.id)
        if current is None:
            raise CollectionNotFoundError(collection.id)
        if current.system:
            raise SystemCollectionError(current.name)

        updated = Collection(
            id=current.id,
            name=current.name,
            fields=collection.fields,
            rules=collection.rules,
        )
        kept = {f.name for f in updated.fields}
        for row in self._data.records[current.id].values():
            for name in set(row) - kept:
                del row[name]
        self._data.collections[current.id] = updated
        return updated

    def delete_collection(self, name_or_id: str) -> None:
        collection = self.require_collection(name_or_id)
        if collection.system:
            raise SystemCollectionError(collection.name)
        del self._data.collections[collection.id]
        del self._data.records[collection.id]

    # --------------------------------------------------------------------- #
    # Records
    # --------------------------------------------------------------------- #

    def get_record(self, collection: str, record_id: str) -> Record | None:
        target = self.require_collection(collection)
        row = self._data.records[target.id].get(record_id)
        if row is None:
            return None
        return self._to_record(target, record_id, row)

    def count_records(self, collection: str) -> int:
        target = self.require_collection(collection)
        return len(self._data.records[target.id])

    def _insert_record(self, collection: Collection, data: dict[str, Any]) -> Record:
        record_id = self._ids.new_id()
        self._data.records[collection.id][record_id] = coerce_numbers(collection, data)
        return self._to_record(collection, record_id, data)

    @staticmethod
    def _to_record(
        collection: Collection, record_id: str, row: dict[str, Any]
    ) -> Record:
        return Record(
            id=record_id,
            collection_id=collection.id,
            collection_name=collection.name,
            data=coerce_numbers(collection, row),
        )
