"""Service layer handlers."""

from collections.abc import Callable
from typing import Any

from .admin_handlers import COMMAND_HANDLERS as ADMIN_COMMAND_HANDLERS
from .sale_handlers import COMMAND_HANDLERS as SALE_COMMAND_HANDLERS
from .schema_handlers import COMMAND_HANDLERS as SCHEMA_COMMAND_HANDLERS

__all__ = ["COMMAND_HANDLERS"]

COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    **SCHEMA_COMMAND_HANDLERS,
    **ADMIN_COMMAND_HANDLERS,
    **SALE_COMMAND_HANDLERS,
}
