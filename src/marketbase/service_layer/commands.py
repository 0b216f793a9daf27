"""Module defining Commands."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


@dataclass(frozen=True)
class ReconcileSchema(Command):
    """Command to bring the stored schema in line with the marketplace schema."""

    policy: str = "rebuild"


@dataclass(frozen=True)
class ImportSchema(Command):
    """Command to create the collections of a schema file, once."""

    candidates: tuple[Path, ...]


@dataclass(frozen=True)
class EnsureAdmin(Command):
    """Command to create the first administrator if none exists."""

    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class CreateSale(Command):
    """Command to record a sale with its commissions computed."""

    shop: str | None
    product: str | None
    amount: Decimal | str | int | None
    affiliate: str | None = None
