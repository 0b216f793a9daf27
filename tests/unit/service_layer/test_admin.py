"""Unit tests for the administrator bootstrap."""

import pytest

from marketbase.adapters.id_generators import SimpleIdGenerator
from marketbase.adapters.passwords import Pbkdf2PasswordHasher
from marketbase.adapters.record_store import InMemoryRecordStore
from marketbase.domain.schema import SUPERUSERS
from marketbase.service_layer.admin import ensure_admin

# pylint: disable=redefined-outer-name, magic-value-comparison


@pytest.fixture
def hasher():
    """Fast hasher for tests."""
    return Pbkdf2PasswordHasher(iterations=1_000)


@pytest.fixture
def store():
    """Fresh in-memory store (system collections only)."""
    return InMemoryRecordStore(SimpleIdGenerator())


def _admins(store):
    return [
        store.get_record(SUPERUSERS, f"{i:015d}")
        for i in range(1, store.count_records(SUPERUSERS) + 1)
    ]


def test_creates_admin_when_none_exists(store, hasher):
    """An empty store gets exactly one administrator."""
    assert ensure_admin(store, "admin@example.com", "s3cret", hasher) is True
    assert store.count_records(SUPERUSERS) == 1


def test_password_is_hashed(store, hasher):
    """The stored password is a verifiable hash, never the clear text."""
    ensure_admin(store, "admin@example.com", "s3cret", hasher)
    (admin,) = _admins(store)
    assert admin.get("email") == "admin@example.com"
    assert admin.get("password") != "s3cret"
    assert hasher.verify("s3cret", admin.get("password"))


def test_existing_admin_is_left_alone(store, hasher):
    """A second call with other credentials changes nothing."""
    ensure_admin(store, "first@example.com", "one", hasher)
    assert ensure_admin(store, "second@example.com", "two", hasher) is False
    (admin,) = _admins(store)
    assert admin.get("email") == "first@example.com"


def test_password_not_logged(store, hasher, caplog):
    """Only the email shows up in the logs."""
    with caplog.at_level("DEBUG"):
        ensure_admin(store, "admin@example.com", "s3cret", hasher)
    assert "s3cret" not in caplog.text
    assert "admin@example.com" in caplog.text
