"""Startup sequence and repair trigger.

`startup` runs, in order:

1. administrator bootstrap (failures are logged, never fatal);
2. schema preparation, by reconciliation (default) or by import of the
   bundled schema file (``MARKETBASE_SCHEMA_MODE=import``);
3. registration of the commission hook on the ``sales`` collection.

Reconciliation errors propagate: a process must not serve requests against a
half-built schema. Import failures are logged, as the import mode has no way
to repair itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from marketbase import config
from marketbase.adapters.schema_file import SchemaFileError
from marketbase.interfaces.record_store import RecordStoreError
from marketbase.service_layer import commands
from marketbase.service_layer.commissions import register_commission_hook
from marketbase.service_layer.reconciler import ReconcileReport
from marketbase.service_layer.schema_import import ImportReport

from .bootstrap import AppContainer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupResult:
    """What the startup sequence did."""

    admin_created: bool | None
    schema: ReconcileReport | ImportReport | None
    hook_registered: bool


def startup(container: AppContainer) -> StartupResult:
    """Run the startup sequence against `container`.

    Raises:
        RecordStoreError: If reconciliation fails.
        ValueError: If the configured schema policy is unknown.
        InvalidSettingError: If the configured schema mode is unknown.
    """
    bus = container.message_bus
    admin_created = _ensure_admin(container)

    schema: ReconcileReport | ImportReport | None
    if config.get_schema_mode() is config.SchemaMode.IMPORT:
        schema = _import_schema(container)
    else:
        schema = bus.handle(commands.ReconcileSchema(policy=config.get_schema_policy()))

    hook_registered = register_commission_hook(container.uow.hooks)
    logger.info("Startup complete")
    return StartupResult(admin_created, schema, hook_registered)


def repair_schema(container: AppContainer) -> tuple[bool, str]:
    """Run one reconciliation pass on demand.

    Meant to be mounted by a host HTTP router (e.g. on ``GET /repair-schema``);
    never raises.

    Returns:
        ``(ok, status_text)``.
    """
    try:
        report = container.message_bus.handle(
            commands.ReconcileSchema(policy=config.get_schema_policy())
        )
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Schema repair failed: %s", e)
        return False, f"Schema repair failed: {e}"
    if report.changed:
        return True, "Schema repaired"
    return True, "Schema up to date"


def _ensure_admin(container: AppContainer) -> bool | None:
    try:
        credentials = config.get_admin_credentials()
        return container.message_bus.handle(
            commands.EnsureAdmin(email=credentials.email, password=credentials.password)
        )
    except (config.ConfigError, RecordStoreError) as e:
        logger.error("Administrator bootstrap failed: %s", e)
        return None


def _import_schema(container: AppContainer) -> ImportReport | None:
    try:
        return container.message_bus.handle(
            commands.ImportSchema(candidates=tuple(config.get_schema_file_candidates()))
        )
    except (SchemaFileError, RecordStoreError) as e:
        logger.error("Schema import failed: %s", e)
        return None
