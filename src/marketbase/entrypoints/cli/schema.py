"""marketbase schema CLI.

Commands
- ``reconcile``: run one reconciliation pass and report what changed.
- ``repair``: the on-demand repair trigger; prints its status line.
- ``import``: create the collections of the bundled schema file, once.
- ``show``: list the stored collections and their fields.
"""

from __future__ import annotations

from pathlib import Path

import click
import click_extra as clickx
from rich.console import Console
from rich.table import Table

from marketbase import config
from marketbase.bootstrap import repair_schema
from marketbase.interfaces.record_store import Field
from marketbase.service_layer import commands

from .helpers import cli_errors, error, load_container, success, warn


@click.group(cls=clickx.ExtraGroup)
def schema() -> None:
    """Marketplace schema management commands."""


@schema.command()
@click.option(
    "--policy",
    type=click.Choice(["rebuild", "additive"], case_sensitive=False),
    default=None,
    help="How drift is repaired. Defaults to MARKETBASE_SCHEMA_POLICY or 'rebuild'.",
)
def reconcile(policy: str | None) -> None:
    """Create missing collections and repair drifted ones."""
    container = load_container()
    with cli_errors():
        report = container.message_bus.handle(
            commands.ReconcileSchema(policy=policy or config.get_schema_policy())
        )

    for name, reasons in report.drift.items():
        warn(f"{name}: {'; '.join(reasons)}")
    if report.deleted:
        click.echo(f"Deleted : {', '.join(report.deleted)}")
    if report.created:
        click.echo(f"Created : {', '.join(report.created)}")
    if report.updated:
        click.echo(f"Updated : {', '.join(report.updated)}")
    success("Schema reconciled" if report.changed else "Schema up to date")


@schema.command()
def repair() -> None:
    """Run the repair trigger and print its status."""
    ok, status_text = repair_schema(load_container())
    if not ok:
        error(status_text)
        raise click.exceptions.Exit(1)
    success(status_text)


@schema.command(name="import")
@click.option(
    "--file",
    "schema_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=(
        "Schema file to read. Defaults to MARKETBASE_SCHEMA_FILE, "
        "then /pb_schema.json."
    ),
)
def import_(schema_file: Path | None) -> None:
    """Create the collections of the schema file unless already present."""
    candidates = (
        (schema_file,) if schema_file else tuple(config.get_schema_file_candidates())
    )
    container = load_container()
    with cli_errors():
        report = container.message_bus.handle(
            commands.ImportSchema(candidates=candidates)
        )
    if report.skipped:
        success("Schema already imported")
    else:
        success(f"Imported {len(report.created) + len(report.updated)} collection(s)")


@schema.command()
def show() -> None:
    """List stored collections with their fields."""
    container = load_container()
    uow = container.uow
    with cli_errors(), uow:
        collections = uow.store.list_collections()
        names = {c.id: c.name for c in collections}
        rows = [(c, uow.store.count_records(c.id)) for c in collections]

    table = Table(title="Collections")
    table.add_column("Name", style="bold")
    table.add_column("Id")
    table.add_column("Records", justify="right")
    table.add_column("Fields")
    for collection, count in rows:
        fields = ", ".join(_describe(f, names) for f in collection.fields)
        label = f"{collection.name} (system)" if collection.system else collection.name
        table.add_row(label, collection.id, str(count), fields)
    Console().print(table)


def _describe(f: Field, names: dict[str, str]) -> str:
    """Render a field as ``name:kind``, with ``->target`` for relations."""
    text = f"{f.name}:{f.kind.value}"
    if f.collection_id:
        text += f"->{names.get(f.collection_id, f.collection_id)}"
    return text
