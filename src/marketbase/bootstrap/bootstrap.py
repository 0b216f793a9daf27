"""Bootstrap the message bus with handlers and unit of work."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from marketbase import config
from marketbase.adapters.db.engine import make_engine
from marketbase.adapters.passwords import Pbkdf2PasswordHasher
from marketbase.adapters.schema_file import read_schema_file
from marketbase.adapters.unit_of_work import SqlAlchemyUnitOfWork
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork
from marketbase.service_layer.handlers import COMMAND_HANDLERS
from marketbase.service_layer.messagebus import MessageBus

if TYPE_CHECKING:
    from marketbase.service_layer.commands import Command


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    message_bus: MessageBus

    @property
    def uow(self) -> AbstractUnitOfWork:
        """The unit of work shared by every handler."""
        return self.message_bus.uow


def build_write_uow(url: str) -> AbstractUnitOfWork:
    """Build a new unit of work for write operations."""
    engine = make_engine(url)
    return SqlAlchemyUnitOfWork(engine)


def build_message_bus(
    uow: AbstractUnitOfWork,
    command_handlers: dict[type[Command], Callable[..., Any]],
    dependencies: Mapping[str, object] | None = None,
) -> MessageBus:
    """Build a message bus with injected dependencies.

    Args:
        uow: Unit of work handed to every handler that asks for ``uow``.
        command_handlers: Undecorated handlers, keyed by command type.
        dependencies: Overrides or additions to the default dependencies
            (``hasher``, ``load_schema``).
    """
    deps: dict[str, object] = {
        "uow": uow,
        "hasher": Pbkdf2PasswordHasher(),
        "load_schema": read_schema_file,
    }
    deps.update(dependencies or {})
    injected_command_handlers = {
        command_type: inject_dependencies(handler, deps)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        uow,
        command_handlers=injected_command_handlers,
    )


def bootstrap(uow: AbstractUnitOfWork | None = None) -> AppContainer:
    """Bootstrap the message bus with handlers and unit of work.

    Args:
        uow: Unit of work to use. Defaults to a SQLAlchemy one connected to
            `MARKETBASE_DB_URL`.

    Raises:
        DatabaseUrlNotSetError: If no `uow` is given and no URL is configured.
    """
    if uow is None:
        uow = build_write_uow(config.get_db_url())
    message_bus = build_message_bus(uow, COMMAND_HANDLERS)

    return AppContainer(
        message_bus=message_bus,
    )


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Bind the dependencies a handler declares in its signature."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return functools.partial(handler, **deps)
