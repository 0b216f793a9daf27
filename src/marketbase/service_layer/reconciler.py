"""Schema reconciliation.

Brings the stored collection definitions in line with the expected schema
graph (`marketbase.domain.schema.MARKETPLACE` by default). Collections are
visited in dependency order, so every relation target is settled before the
collections pointing at it.

For each collection:

1. absent: create it with its full field set and access rules;
2. present: look for drift, i.e. a missing field, a field of the wrong kind,
   or a relation whose stored target identifier is not the current identifier
   of the referenced collection;
3. drift under the ``rebuild`` policy: delete every transitive dependent
   (deepest first), delete the collection, and create it again. All rows of
   the deleted collections are discarded;
4. drift under the ``additive`` policy: add missing fields and re-point stale
   relations in place, keeping the rows. A kind mismatch cannot be fixed in
   place and still triggers a rebuild.

Every mutation is followed by a checkpoint (normally ``uow.commit``). A pass
that fails half-way therefore leaves its completed steps in place, and the
next pass picks up from there. Running a pass twice without outside changes
performs no mutation the second time.

Not safe to run concurrently with itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from marketbase.domain.schema import MARKETPLACE, CollectionSpec, FieldSpec, SchemaGraph
from marketbase.interfaces.record_store import Collection, Field, RecordStore

logger = logging.getLogger(__name__)


class MigrationPolicy(str, Enum):
    """What the reconciler does about drift."""

    REBUILD = "rebuild"
    ADDITIVE = "additive"

    @classmethod
    def from_string(cls, value: str) -> MigrationPolicy:
        """Parse a policy name, case-insensitively.

        Raises:
            ValueError: If the name is unknown.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unknown schema policy {value!r}; expected one of {allowed}"
            ) from e


@dataclass(frozen=True, slots=True)
class Drift:
    """Differences between a stored collection and its expected spec."""

    collection: str
    reasons: tuple[str, ...]
    rebuild_required: bool = False


@dataclass
class ReconcileReport:
    """What a reconciliation pass did, in order."""

    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    drift: dict[str, list[str]] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        """True if the pass mutated the store."""
        return bool(self.created or self.deleted or self.updated)


def resolve_field(store: RecordStore, spec: FieldSpec) -> Field:
    """Build the stored form of `spec`, resolving its relation target.

    Raises:
        CollectionNotFoundError: If the relation target does not exist.
    """
    collection_id = None
    if spec.is_relation and spec.target is not None:
        collection_id = store.require_collection(spec.target).id
    return Field(
        name=spec.name,
        kind=spec.kind,
        required=spec.required,
        collection_id=collection_id,
        max_select=spec.max_select,
        cascade_delete=spec.cascade_delete,
        max_size=spec.max_size,
        mime_types=spec.mime_types,
    )


def resolve_fields(store: RecordStore, spec: CollectionSpec) -> tuple[Field, ...]:
    """Resolve every field of `spec`, in declaration order."""
    return tuple(resolve_field(store, f) for f in spec.fields)


def detect_drift(
    store: RecordStore, spec: CollectionSpec, existing: Collection
) -> Drift | None:
    """Compare a stored collection with its spec.

    Extra stored fields are not drift. Access rules are not compared.

    Returns:
        The drift found, or None if the collection matches.
    """
    reasons: list[str] = []
    rebuild_required = False
    for expected in spec.fields:
        stored = existing.get_field(expected.name)
        if stored is None:
            reasons.append(f"missing field '{expected.name}'")
            continue
        if stored.kind is not expected.kind:
            reasons.append(
                f"field '{expected.name}' is {stored.kind.value}, "
                f"expected {expected.kind.value}"
            )
            rebuild_required = True
            continue
        if expected.is_relation and expected.target is not None:
            target = store.require_collection(expected.target)
            if stored.collection_id != target.id:
                reasons.append(
                    f"relation '{expected.name}' targets {stored.collection_id}, "
                    f"expected {target.id} ({target.name})"
                )
    if not reasons:
        return None
    return Drift(spec.name, tuple(reasons), rebuild_required)


class SchemaReconciler:
    """Reconcile a record store against a schema graph.

    Args:
        store: The record store to inspect and repair.
        graph: Expected collections. Defaults to the marketplace schema.
        policy: How drift is repaired.
        checkpoint: Called after every mutation; usually ``uow.commit``.
    """

    def __init__(
        self,
        store: RecordStore,
        graph: SchemaGraph = MARKETPLACE,
        *,
        policy: MigrationPolicy = MigrationPolicy.REBUILD,
        checkpoint: Callable[[], None] | None = None,
    ) -> None:
        self.store = store
        self.graph = graph
        self.policy = policy
        self._checkpoint = checkpoint or (lambda: None)

    def reconcile(self) -> ReconcileReport:
        """Run one reconciliation pass.

        Raises:
            RecordStoreError: The first store error aborts the pass; the steps
                already checkpointed stay applied.
        """
        report = ReconcileReport()
        for name in self.graph.order:
            spec = self.graph[name]
            existing = self.store.find_collection(name)
            if existing is None:
                self._create(spec, report)
                continue

            drift = detect_drift(self.store, spec, existing)
            if drift is None:
                logger.debug("Collection %s is up to date", name)
                continue

            report.drift[name] = list(drift.reasons)
            logger.info("Schema drift in %s: %s", name, "; ".join(drift.reasons))
            if self.policy is MigrationPolicy.ADDITIVE and not drift.rebuild_required:
                self._patch(existing, spec, report)
            else:
                self._rebuild(spec, report)

        if report.changed:
            logger.info(
                "Schema reconciled: created=%s deleted=%s updated=%s",
                report.created,
                report.deleted,
                report.updated,
            )
        else:
            logger.debug("Schema reconciled: no changes")
        return report

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def _create(self, spec: CollectionSpec, report: ReconcileReport) -> None:
        collection = self.store.create_collection(
            spec.name, resolve_fields(self.store, spec), spec.rules
        )
        self._checkpoint()
        report.created.append(spec.name)
        logger.info("Created collection %s (%s)", spec.name, collection.id)

    def _delete(self, name: str, report: ReconcileReport) -> None:
        if rows := self.store.count_records(name):
            logger.warning(
                "Deleting collection %s discards %d record(s)", name, rows
            )
        self.store.delete_collection(name)
        self._checkpoint()
        report.deleted.append(name)
        logger.info("Deleted collection %s", name)

    def _rebuild(self, spec: CollectionSpec, report: ReconcileReport) -> None:
        for dependent in self.graph.dependents(spec.name):
            if self.store.find_collection(dependent) is not None:
                self._delete(dependent, report)
        self._delete(spec.name, report)
        self._create(spec, report)

    def _patch(
        self, existing: Collection, spec: CollectionSpec, report: ReconcileReport
    ) -> None:
        fields = list(existing.fields)
        for expected in spec.fields:
            resolved = resolve_field(self.store, expected)
            stored = existing.get_field(expected.name)
            if stored is None:
                fields.append(resolved)
            elif (
                expected.is_relation
                and stored.collection_id != resolved.collection_id
            ):
                fields[fields.index(stored)] = resolved
        self.store.update_collection(existing.with_fields(fields))
        self._checkpoint()
        report.updated.append(spec.name)
        logger.info("Updated collection %s in place", spec.name)
