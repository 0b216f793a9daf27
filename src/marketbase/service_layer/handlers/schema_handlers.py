"""Handlers managing the stored schema."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from marketbase.domain.schema import CollectionSpec
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork
from marketbase.service_layer import commands
from marketbase.service_layer import schema_import as importer
from marketbase.service_layer.reconciler import (
    MigrationPolicy,
    ReconcileReport,
    SchemaReconciler,
)


def reconcile_schema(
    cmd: commands.ReconcileSchema, uow: AbstractUnitOfWork
) -> ReconcileReport:
    """Reconcile the stored collections, committing after every step."""
    policy = MigrationPolicy.from_string(cmd.policy)
    with uow:
        reconciler = SchemaReconciler(uow.store, policy=policy, checkpoint=uow.commit)
        return reconciler.reconcile()


def import_schema(
    cmd: commands.ImportSchema,
    uow: AbstractUnitOfWork,
    load_schema: Callable[[Sequence[Path]], Sequence[CollectionSpec]],
) -> importer.ImportReport:
    """Create the collections of the schema file unless already imported."""
    with uow:
        return importer.import_schema(
            uow.store,
            lambda: load_schema(cmd.candidates),
            checkpoint=uow.commit,
        )


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.ReconcileSchema: reconcile_schema,
    commands.ImportSchema: import_schema,
}
