"""Handlers relating to administrator accounts."""

from collections.abc import Callable
from typing import Any

from marketbase.interfaces.password_hasher import PasswordHasher
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork
from marketbase.service_layer import admin, commands


def ensure_admin(
    cmd: commands.EnsureAdmin, uow: AbstractUnitOfWork, hasher: PasswordHasher
) -> bool:
    """Create the first administrator; return True if one was created."""
    with uow:
        created = admin.ensure_admin(uow.store, cmd.email, cmd.password, hasher)
        uow.commit()
    return created


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.EnsureAdmin: ensure_admin,
}
