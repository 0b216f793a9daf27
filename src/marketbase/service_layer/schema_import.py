"""Declarative schema import.

The alternative to reconciliation: collections are created once from a schema
file and never repaired afterwards. The import is skipped entirely as soon as
the ``shops`` collection exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace

from marketbase.domain.schema import SHOPS, CollectionSpec
from marketbase.interfaces.record_store import RecordStore

from .reconciler import resolve_fields

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Outcome of a schema import."""

    skipped: bool = False
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)


def import_collections(
    store: RecordStore,
    specs: Sequence[CollectionSpec],
    *,
    checkpoint: Callable[[], None] | None = None,
) -> ImportReport:
    """Create or update the collections described by `specs`, in order.

    A collection whose name already exists has its fields and rules replaced
    in place; system collections are left untouched. Relation targets are
    resolved by name or identifier against the collections present at that
    point, so a file must list targets first.

    Raises:
        CollectionNotFoundError: If a relation target cannot be resolved.
    """
    checkpoint = checkpoint or (lambda: None)
    report = ImportReport()
    for spec in specs:
        existing = store.find_collection(spec.name)
        if existing is not None and existing.system:
            logger.debug("System collection %s left as is", spec.name)
            continue
        fields = resolve_fields(store, spec)
        if existing is None:
            store.create_collection(spec.name, fields, spec.rules)
            report.created.append(spec.name)
        else:
            store.update_collection(replace(existing, fields=fields, rules=spec.rules))
            report.updated.append(spec.name)
        checkpoint()
        logger.debug("Imported collection %s", spec.name)

    logger.info(
        "Schema imported: created=%s updated=%s", report.created, report.updated
    )
    return report


def import_schema(
    store: RecordStore,
    load: Callable[[], Sequence[CollectionSpec]],
    *,
    checkpoint: Callable[[], None] | None = None,
) -> ImportReport:
    """Import the schema returned by `load` unless already imported.

    `load` is only called when an import is needed, so a missing schema file
    is not an error once the store is populated.

    Raises:
        SchemaFileError: Whatever `load` raises when the file is unusable.
    """
    if store.find_collection(SHOPS) is not None:
        logger.info("Collection %s exists; schema import skipped", SHOPS)
        return ImportReport(skipped=True)
    return import_collections(store, load(), checkpoint=checkpoint)
