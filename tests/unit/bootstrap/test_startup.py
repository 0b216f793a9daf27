"""Unit tests for the startup sequence and the repair trigger.

The container is built around the in-memory fake unit of work, so these tests
exercise the wiring and the error policy without a database.
"""

import json
import logging
from decimal import Decimal

import pytest

from marketbase import config
from marketbase.bootstrap import AppContainer, repair_schema, startup
from marketbase.domain.schema import AFFILIATES, PRODUCTS, SALES, SHOPS, SUPERUSERS
from marketbase.interfaces.record_store import StoreUnavailableError
from marketbase.service_layer.reconciler import ReconcileReport
from marketbase.service_layer.schema_import import ImportReport
from tests.unit.service_layer.handlers.fakes import bootstrap_test_bus

# pylint: disable=magic-value-comparison, redefined-outer-name


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Admin credentials set, every other setting at its default."""
    for name in (config.SCHEMA_MODE_ENV, config.SCHEMA_POLICY_ENV, config.SCHEMA_FILE_ENV):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(config.ADMIN_EMAIL_ENV, "admin@example.com")
    monkeypatch.setenv(config.ADMIN_PASSWORD_ENV, "s3cret")


@pytest.fixture
def container() -> AppContainer:
    """A container backed by the in-memory fake unit of work."""
    return AppContainer(message_bus=bootstrap_test_bus())


def test_startup_runs_every_step(container):
    """Admin created, schema reconciled, hook registered."""
    result = startup(container)

    assert result.admin_created is True
    assert isinstance(result.schema, ReconcileReport)
    assert result.schema.created == [SHOPS, PRODUCTS, AFFILIATES, SALES]
    assert result.hook_registered is True
    assert container.uow.store.count_records(SUPERUSERS) == 1


def test_startup_is_idempotent(container):
    """A second run changes nothing and registers no second hook."""
    startup(container)
    result = startup(container)

    assert result.admin_created is False
    assert not result.schema.changed
    assert result.hook_registered is False
    assert len(container.uow.hooks.before_create_hooks(SALES)) == 1


def test_registered_hook_computes_commissions(container, make_shop):
    """Sales created directly on the store get their platform fee."""
    startup(container)
    store = container.uow.store
    shop = make_shop(store, commission_rate=Decimal("5"))

    sale = store.create_record(SALES, {"shop": shop.id, "amount": Decimal("200")})

    assert sale.get("platform_fee") == Decimal("10.00")


def test_missing_admin_credentials_are_not_fatal(container, monkeypatch, caplog):
    """The schema is still prepared when no administrator can be created."""
    monkeypatch.delenv(config.ADMIN_EMAIL_ENV)

    with caplog.at_level(logging.ERROR, logger="marketbase.bootstrap.startup"):
        result = startup(container)

    assert result.admin_created is None
    assert result.schema.created
    assert "Administrator bootstrap failed" in caplog.text
    assert container.uow.store.count_records(SUPERUSERS) == 0


def test_unknown_policy_propagates(container, monkeypatch):
    """A misconfigured policy stops the startup."""
    monkeypatch.setenv(config.SCHEMA_POLICY_ENV, "yolo")
    with pytest.raises(ValueError, match="Unknown schema policy"):
        startup(container)


def test_reconcile_errors_propagate(container, monkeypatch):
    """Reconciliation failures are fatal."""

    def unavailable(*args, **kwargs):
        raise StoreUnavailableError("database is locked")

    monkeypatch.setattr(container.uow.store, "create_collection", unavailable)
    with pytest.raises(StoreUnavailableError):
        startup(container)


def test_import_mode(container, monkeypatch, tmp_path):
    """The schema file is imported instead of reconciled."""
    schema = tmp_path / "pb_schema.json"
    schema.write_text(
        json.dumps([{"name": "shops", "fields": [{"name": "name", "type": "text"}]}]),
        encoding="utf-8",
    )
    monkeypatch.setenv(config.SCHEMA_MODE_ENV, "import")
    monkeypatch.setenv(config.SCHEMA_FILE_ENV, str(schema))

    result = startup(container)

    assert isinstance(result.schema, ImportReport)
    assert result.schema.created == [SHOPS]
    assert result.hook_registered is True


def test_import_mode_missing_file_is_logged(container, monkeypatch, tmp_path, caplog):
    """A missing schema file does not stop the startup."""
    monkeypatch.setenv(config.SCHEMA_MODE_ENV, "import")
    monkeypatch.setenv(config.SCHEMA_FILE_ENV, str(tmp_path / "missing.json"))
    # the container-root fallback may exist on the host running the tests
    monkeypatch.setattr(config, "FALLBACK_SCHEMA_FILE", tmp_path / "missing.json")

    with caplog.at_level(logging.ERROR, logger="marketbase.bootstrap.startup"):
        result = startup(container)

    assert result.schema is None
    assert "Schema import failed" in caplog.text


def test_repair_on_fresh_store(container):
    """The first pass builds the schema."""
    assert repair_schema(container) == (True, "Schema repaired")


def test_repair_when_up_to_date(container):
    """A second pass has nothing to do."""
    repair_schema(container)
    assert repair_schema(container) == (True, "Schema up to date")


def test_repair_failure_is_reported(container, monkeypatch, caplog):
    """Failures come back as text instead of propagating."""

    def unavailable(*args, **kwargs):
        raise StoreUnavailableError("database is locked")

    monkeypatch.setattr(container.uow.store, "create_collection", unavailable)

    with caplog.at_level(logging.ERROR, logger="marketbase.bootstrap.startup"):
        ok, status = repair_schema(container)

    assert ok is False
    assert status == "Schema repair failed: database is locked"
    assert "Schema repair failed" in caplog.text
