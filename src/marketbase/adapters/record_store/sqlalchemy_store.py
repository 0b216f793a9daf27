"""SQLAlchemy-backed RecordStore adapter for MARKETBASE.

Collections and records are stored in the `collections` and `records` tables
(see `marketbase.adapters.record_store.tables`). Field values are kept as JSON;
``Decimal`` numbers are written as decimal strings so no precision is lost and
turned back into ``Decimal`` on read according to the collection's NUMBER
fields.

Usage:
    Instantiate SqlAlchemyRecordStore with a SQLAlchemy Connection. The store
    never commits; the owning unit of work does.

Exceptions:
    Maps SQLAlchemy errors to record store exceptions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any, NoReturn

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from marketbase.adapters.id_generators import ULIDGenerator
from marketbase.domain.schema import AccessRules
from marketbase.interfaces.record_store import (
    Collection,
    CollectionNotFoundError,
    DuplicateCollectionError,
    Field,
    InvalidRecordError,
    Record,
    RecordHooks,
    RecordStore,
    StoreUnavailableError,
    SystemCollectionError,
    coerce_numbers,
    rules_from_dict,
    rules_to_dict,
)

from .system import system_collections
from .tables import collections, records

if TYPE_CHECKING:
    from sqlalchemy import RowMapping
    from sqlalchemy.engine import Connection, Engine

    from marketbase.interfaces.id_generator import IdGenerator


def _to_json(value: Any) -> Any:
    """Recursively replace ``Decimal`` with its string form."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Mapping):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


class SqlAlchemyRecordStore(RecordStore):
    """SQLAlchemy-backed RecordStore.

    - Uses the `collections` and `records` tables.
    - Resolves collections by id first, then by name.
    - Deletes records explicitly before their collection, so deletion works
      even where the database does not enforce foreign keys.
    """

    def __init__(
        self,
        connection: Connection,
        id_generator: IdGenerator | None = None,
        *,
        hooks: RecordHooks | None = None,
    ) -> None:
        self.connection = connection
        self._ids = id_generator or ULIDGenerator()
        self.hooks = hooks if hooks is not None else RecordHooks()

    # --------------------------------------------------------------------- #
    # Collections
    # --------------------------------------------------------------------- #

    def find_collection(self, name_or_id: str) -> Collection | None:
        stmt = (
            select(collections)
            .where(
                or_(collections.c.id == name_or_id, collections.c.name == name_or_id)
            )
            # an exact id match wins over a name match
            .order_by((collections.c.id == name_or_id).desc())
            .limit(1)
        )
        row = self._execute(stmt).mappings().first()
        return None if row is None else self._row_to_collection(row)

    def list_collections(self) -> list[Collection]:
        stmt = select(collections).order_by(
            collections.c.created_at, collections.c.name
        )
        return [self._row_to_collection(r) for r in self._execute(stmt).mappings()]

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
        try:
            self.connection.execute(
                insert(collections).values(
                    id=collection.id,
                    name=collection.name,
                    system=False,
                    fields=[f.to_dict() for f in collection.fields],
                    rules=rules_to_dict(collection.rules),
                )
            )
        except IntegrityError as e:
            raise DuplicateCollectionError(name) from e
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e
        return collection

    def update_collection(self, collection: Collection) -> Collection:
        current = self.find_collection(collection.id)
        if current is None or current.id != collection.id:
            raise CollectionNotFoundError(collection.id)
        if current.system:
            raise SystemCollectionError(current.name)

        self._execute(
            update(collections)
            .where(collections.c.id == current.id)
            .values(
                fields=[f.to_dict() for f in collection.fields],
                rules=rules_to_dict(collection.rules),
            )
        )

        kept = {f.name for f in collection.fields}
        removed = {f.name for f in current.fields} - kept
        if removed:
            rows = self._execute(
                select(records.c.id, records.c.data).where(
                    records.c.collection_id == current.id
                )
            ).all()
            for record_id, data in rows:
                if removed & set(data):
                    self._execute(
                        update(records)
                        .where(records.c.id == record_id)
                        .values(data={k: v for k, v in data.items() if k in kept})
                    )

        return Collection(
            id=current.id,
            name=current.name,
            fields=collection.fields,
            rules=collection.rules,
        )

    def delete_collection(self, name_or_id: str) -> None:
        collection = self.require_collection(name_or_id)
        if collection.system:
            raise SystemCollectionError(collection.name)
        self._execute(delete(records).where(records.c.collection_id == collection.id))
        self._execute(delete(collections).where(collections.c.id == collection.id))

    # --------------------------------------------------------------------- #
    # Records
    # --------------------------------------------------------------------- #

    def get_record(self, collection: str, record_id: str) -> Record | None:
        target = self.require_collection(collection)
        row = (
            self._execute(
                select(records.c.id, records.c.data).where(
                    records.c.collection_id == target.id, records.c.id == record_id
                )
            )
            .mappings()
            .first()
        )
        if row is None:
            return None
        return Record(
            id=row["id"],
            collection_id=target.id,
            collection_name=target.name,
            data=coerce_numbers(target, row["data"]),
        )

    def count_records(self, collection: str) -> int:
        target = self.require_collection(collection)
        stmt = select(func.count()).where(records.c.collection_id == target.id)
        return int(self._execute(stmt).scalar_one())

    def _insert_record(self, collection: Collection, data: dict[str, Any]) -> Record:
        record_id = self._ids.new_id()
        try:
            self.connection.execute(
                insert(records).values(
                    id=record_id, collection_id=collection.id, data=_to_json(data)
                )
            )
        except IntegrityError as e:
            raise InvalidRecordError(str(e.orig or e)) from e
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e
        return Record(
            id=record_id,
            collection_id=collection.id,
            collection_name=collection.name,
            data=coerce_numbers(collection, data),
        )

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _execute(self, stmt: Any) -> Any:
        """Execute `stmt`, mapping driver errors to store errors."""
        try:
            return self.connection.execute(stmt)
        except DBAPIError as e:
            self._raise_store_error(e)

    @staticmethod
    def _raise_store_error(error: DBAPIError) -> NoReturn:
        if isinstance(error, IntegrityError):
            raise InvalidRecordError(str(error.orig or error)) from error
        raise StoreUnavailableError(str(error)) from error

    @staticmethod
    def _row_to_collection(row: RowMapping) -> Collection:
        return Collection(
            id=row["id"],
            name=row["name"],
            fields=tuple(Field.from_dict(f) for f in row["fields"]),
            rules=rules_from_dict(row["rules"]),
            system=bool(row["system"]),
        )


def seed_system_collections(engine: Engine) -> None:
    """Insert the system collections that do not exist yet.

    Idempotent. `marketbase db upgrade` seeds them too; this covers databases
    whose tables were created by other means (e.g. `metadata.create_all`).
    """
    with engine.begin() as conn:
        for system in system_collections():
            exists = conn.execute(
                select(collections.c.id).where(collections.c.id == system.id)
            ).first()
            if exists is None:
                conn.execute(
                    insert(collections).values(
                        id=system.id,
                        name=system.name,
                        system=True,
                        fields=[f.to_dict() for f in system.fields],
                        rules=rules_to_dict(system.rules),
                    )
                )
