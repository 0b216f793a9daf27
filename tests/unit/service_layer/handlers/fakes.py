"""Fake implementations for testing service layer handlers."""

from marketbase.adapters.id_generators import SimpleIdGenerator
from marketbase.adapters.passwords import Pbkdf2PasswordHasher
from marketbase.adapters.record_store import InMemoryRecordStore
from marketbase.bootstrap.bootstrap import build_message_bus
from marketbase.interfaces.record_store import RecordHooks
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork
from marketbase.service_layer.handlers import COMMAND_HANDLERS


class FakeUoW(AbstractUnitOfWork):
    """A fake unit of work for testing purposes.

    Changes are applied to the in-memory store immediately; `commit` only
    records that it was called.
    """

    def __init__(self):
        self.hooks = RecordHooks()
        self.store = InMemoryRecordStore(SimpleIdGenerator(), hooks=self.hooks)
        self.committed = False
        self.commits = 0

    def commit(self):
        self.committed = True
        self.commits += 1

    def rollback(self):
        pass


def bootstrap_test_bus(**dependencies):
    """Bootstrap a message bus for testing purposes."""
    dependencies.setdefault("hasher", Pbkdf2PasswordHasher(iterations=1_000))
    return build_message_bus(
        uow=FakeUoW(), command_handlers=COMMAND_HANDLERS, dependencies=dependencies
    )
