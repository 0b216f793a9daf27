"""Record store interfaces for MARKETBASE.

This module defines:
- The stored shapes: `Field`, `Collection` and `Record` DTOs.
- The `RecordStore` port (framework-free ABC) for collection and record CRUD.
- `RecordHooks`, the before-create hook point fired by `create_record`.
- A small, adapter-agnostic exception hierarchy for precise error handling.

Layering & dependency rules:
- Lives under `marketbase.interfaces`. Do NOT import from adapters, bootstrap,
  or entrypoints.
- Safe to import from service layer and adapters.

Contract overview
-----------------
Collections:
- Identified by an `id` assigned by the store, distinct from the unique `name`.
- `find_collection` accepts either a name or an id and returns None when absent.
- Relation fields store the *identifier* of their target collection.
- Deleting a collection discards all of its records.
- System collections (`users`, `_superusers`) always exist and cannot be
  deleted (`SystemCollectionError`).

Records:
- `create_record` runs the before-create hooks registered for the collection
  (unless `run_hooks=False`), validates the payload, then persists it.
  A hook may mutate the payload in place or raise to abort the creation; the
  record is not persisted in that case.
- Unknown field names and missing required values raise `InvalidRecordError`.
- Relation values are *not* checked against existing records.
- `NUMBER` values are returned as `Decimal`.

Errors:
- `CollectionNotFoundError`, `RecordNotFoundError`: lookup errors.
- `DuplicateCollectionError`, `InvalidRecordError`, and
  `SystemCollectionError`: rejected writes.
- `StoreUnavailableError`: transient driver/DB issues; callers may retry.
"""

from __future__ import annotations

import abc
import copy
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from marketbase.domain.errors import InvalidAmountError
from marketbase.domain.money import to_decimal
from marketbase.domain.schema import AccessRules, FieldKind

# --- Exceptions to standardize adapter behavior ---


class RecordStoreError(Exception):
    """Base class for MARKETBASE record store errors."""


class CollectionNotFoundError(RecordStoreError, LookupError):
    """The referenced collection does not exist."""

    def __init__(self, name_or_id: str) -> None:
        super().__init__(f"Collection ({name_or_id}) not found")
        self.name_or_id = name_or_id


class RecordNotFoundError(RecordStoreError, LookupError):
    """The referenced record does not exist."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"Record ({collection}/{record_id}) not found")
        self.collection = collection
        self.record_id = record_id


class DuplicateCollectionError(RecordStoreError):
    """A collection with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection ({name}) already exists")
        self.name = name


class SystemCollectionError(RecordStoreError):
    """System collections cannot be deleted or redefined."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection ({name}) is a system collection")
        self.name = name


class InvalidRecordError(RecordStoreError):
    """The record payload violates the collection definition."""


class StoreUnavailableError(RecordStoreError):
    """Operational/timeout/connection errors; callers may retry."""


# --- DTOs ---


@dataclass(frozen=True, slots=True)
class Field:
    """A stored field definition.

    Unlike `marketbase.domain.schema.FieldSpec`, a relation points at its
    target by collection *identifier* (`collection_id`).
    """

    name: str
    kind: FieldKind
    required: bool = False
    collection_id: str | None = None
    max_select: int | None = None
    cascade_delete: bool = False
    max_size: int | None = None
    mime_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "required": self.required,
            "collection_id": self.collection_id,
            "max_select": self.max_select,
            "cascade_delete": self.cascade_delete,
            "max_size": self.max_size,
            "mime_types": list(self.mime_types),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Field:
        """Inverse of `to_dict`."""
        return cls(
            name=data["name"],
            kind=FieldKind(data["kind"]),
            required=bool(data.get("required", False)),
            collection_id=data.get("collection_id"),
            max_select=data.get("max_select"),
            cascade_delete=bool(data.get("cascade_delete", False)),
            max_size=data.get("max_size"),
            mime_types=tuple(data.get("mime_types") or ()),
        )


def rules_to_dict(rules: AccessRules) -> dict[str, str | None]:
    """Serialize access rules to a JSON-compatible dict."""
    return {
        "list_rule": rules.list_rule,
        "view_rule": rules.view_rule,
        "create_rule": rules.create_rule,
        "update_rule": rules.update_rule,
        "delete_rule": rules.delete_rule,
    }


def rules_from_dict(data: Mapping[str, Any] | None) -> AccessRules:
    """Inverse of `rules_to_dict`; missing keys mean administrator only."""
    data = data or {}
    return AccessRules(
        list_rule=data.get("list_rule"),
        view_rule=data.get("view_rule"),
        create_rule=data.get("create_rule"),
        update_rule=data.get("update_rule"),
        delete_rule=data.get("delete_rule"),
    )


@dataclass(frozen=True, slots=True)
class Collection:
    """A stored collection definition."""

    id: str
    name: str
    fields: tuple[Field, ...]
    rules: AccessRules = field(default_factory=AccessRules)
    system: bool = False

    def get_field(self, name: str) -> Field | None:
        """Return the field called `name`, if defined."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def with_fields(self, fields: Sequence[Field]) -> Collection:
        """Return a copy with `fields` replacing the current field set."""
        return replace(self, fields=tuple(fields))


@dataclass(frozen=True, slots=True)
class Record:
    """A stored record. `data` maps field names to values."""

    id: str
    collection_id: str
    collection_name: str
    data: Mapping[str, Any]

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of field `name`, or `default` when unset."""
        value = self.data.get(name)
        return default if value is None else value


# --- Hooks ---

BeforeCreateHook = Callable[["RecordStore", Collection, dict[str, Any]], None]


class RecordHooks:
    """Registry of before-create hooks, keyed by collection name."""

    def __init__(self) -> None:
        self._before_create: dict[str, list[BeforeCreateHook]] = defaultdict(list)

    def on_before_create(self, collection_name: str, hook: BeforeCreateHook) -> None:
        """Register `hook` to run before a record of `collection_name` is created."""
        self._before_create[collection_name].append(hook)

    def before_create_hooks(self, collection_name: str) -> tuple[BeforeCreateHook, ...]:
        """Hooks registered for `collection_name`, in registration order."""
        return tuple(self._before_create.get(collection_name, ()))

    def run_before_create(
        self, store: RecordStore, collection: Collection, data: dict[str, Any]
    ) -> None:
        """Run every hook for `collection`; the first exception aborts."""
        for hook in self.before_create_hooks(collection.name):
            hook(store, collection, data)


# --- Validation shared by adapters ---


def validate_record_data(collection: Collection, data: Mapping[str, Any]) -> None:
    """Check a record payload against its collection definition.

    Raises:
        InvalidRecordError: On unknown fields, missing required values, or
            NUMBER values that are not finite decimals (booleans included).
    """
    known = {f.name for f in collection.fields}
    if unknown := sorted(set(data) - known):
        raise InvalidRecordError(
            f"Unknown field(s) for {collection.name}: {', '.join(unknown)}"
        )
    for f in collection.fields:
        if f.required and data.get(f.name) in (None, ""):
            raise InvalidRecordError(
                f"Field '{f.name}' is required for {collection.name}"
            )
        if f.kind is FieldKind.NUMBER and data.get(f.name) not in (None, ""):
            try:
                to_decimal(data[f.name], f.name)
            except InvalidAmountError as e:
                raise InvalidRecordError(f"{e} ({collection.name})") from e


def coerce_numbers(collection: Collection, data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of `data` with NUMBER fields converted to `Decimal`.

    Nested JSON values are copied too, so the result shares nothing with
    `data`. Expects a payload that passed `validate_record_data`.
    """
    result = copy.deepcopy(dict(data))
    for f in collection.fields:
        if f.kind is FieldKind.NUMBER and result.get(f.name) not in (None, ""):
            result[f.name] = to_decimal(result[f.name], f.name)
    return result


# --- Record Store Interface ---


class RecordStore(abc.ABC):
    """An abstract base class for a record store.

    Concrete stores set `hooks` in their constructor; several stores (e.g. one
    per unit-of-work connection) may share a single `RecordHooks` registry.
    """

    hooks: RecordHooks

    # ------------------------------------------------------------------ #
    # Collections
    # ------------------------------------------------------------------ #

    @abc.abstractmethod
    def find_collection(self, name_or_id: str) -> Collection | None:
        """Find a collection by name or identifier.

        Returns:
            The collection, or None if it does not exist.
        """

    @abc.abstractmethod
    def list_collections(self) -> list[Collection]:
        """Return every collection, system collections included."""

    @abc.abstractmethod
    def create_collection(
        self,
        name: str,
        fields: Sequence[Field],
        rules: AccessRules | None = None,
    ) -> Collection:
        """Create and persist a new collection.

        Raises:
            DuplicateCollectionError: If `name` is already taken.
            StoreUnavailableError: For operational errors.

        Returns:
            The stored collection, with its newly assigned identifier.
        """

    @abc.abstractmethod
    def update_collection(self, collection: Collection) -> Collection:
        """Replace the fields and rules of an existing collection in place.

        Existing records are kept; values of removed fields are dropped.

        Raises:
            CollectionNotFoundError: If `collection.id` does not exist.
            SystemCollectionError: If the collection is a system collection.
        """

    @abc.abstractmethod
    def delete_collection(self, name_or_id: str) -> None:
        """Delete a collection together with all of its records.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            SystemCollectionError: If the collection is a system collection.
        """

    # ------------------------------------------------------------------ #
    # Records
    # ------------------------------------------------------------------ #

    @abc.abstractmethod
    def get_record(self, collection: str, record_id: str) -> Record | None:
        """Find a record by id within a collection (name or id).

        Raises:
            CollectionNotFoundError: If the collection does not exist.

        Returns:
            The record, or None if it does not exist.
        """

    @abc.abstractmethod
    def count_records(self, collection: str) -> int:
        """Count the records of a collection (name or id).

        Raises:
            CollectionNotFoundError: If the collection does not exist.
        """

    def create_record(
        self,
        collection: str,
        data: Mapping[str, Any],
        *,
        run_hooks: bool = True,
    ) -> Record:
        """Create a record, firing the before-create hooks first.

        Args:
            collection: Collection name or identifier.
            data: Field values. Copied; the caller's mapping is not mutated.
            run_hooks: Set to False when the caller already applied the logic
                the hooks implement.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            InvalidRecordError: If the payload violates the definition.
            Exception: Whatever a hook raises to abort the creation.

        Returns:
            The persisted record.
        """
        target = self.require_collection(collection)
        payload = dict(data)
        if run_hooks:
            self.hooks.run_before_create(self, target, payload)
        validate_record_data(target, payload)
        return self._insert_record(target, coerce_numbers(target, payload))

    def require_collection(self, name_or_id: str) -> Collection:
        """Like `find_collection`, but raise when absent.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
        """
        if (found := self.find_collection(name_or_id)) is None:
            raise CollectionNotFoundError(name_or_id)
        return found

    def require_record(self, collection: str, record_id: str) -> Record:
        """Like `get_record`, but raise when absent.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            RecordNotFoundError: If the record does not exist.
        """
        if (found := self.get_record(collection, record_id)) is None:
            raise RecordNotFoundError(collection, record_id)
        return found

    @abc.abstractmethod
    def _insert_record(self, collection: Collection, data: dict[str, Any]) -> Record:
        """Persist an already validated payload and return the stored record."""
