"""Configuration utilities for MARKETBASE.

This module centralizes small helpers and constants related to application
configuration. All settings come from ``MARKETBASE_*`` environment variables;
nothing secret has a literal default.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from importlib.resources import files
from pathlib import Path
from typing import TextIO

from alembic.config import Config

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate

DB_URL_ENV = "MARKETBASE_DB_URL"
ADMIN_EMAIL_ENV = "MARKETBASE_ADMIN_EMAIL"
ADMIN_PASSWORD_ENV = "MARKETBASE_ADMIN_PASSWORD"  # nosec B105
SCHEMA_MODE_ENV = "MARKETBASE_SCHEMA_MODE"
SCHEMA_POLICY_ENV = "MARKETBASE_SCHEMA_POLICY"
SCHEMA_FILE_ENV = "MARKETBASE_SCHEMA_FILE"

DEFAULT_SCHEMA_FILE = Path("pb_schema.json")
FALLBACK_SCHEMA_FILE = Path("/pb_schema.json")


class ConfigError(Exception):
    """Base class for configuration errors."""


class DatabaseUrlNotSetError(ConfigError):
    """Raised when the MARKETBASE_DB_URL environment variable is not set."""


class AdminCredentialsNotSetError(ConfigError):
    """Raised when the bootstrap administrator credentials are not configured."""

    def __init__(self) -> None:
        super().__init__(
            f"{ADMIN_EMAIL_ENV} and {ADMIN_PASSWORD_ENV} must both be set "
            "to bootstrap an administrator."
        )


class InvalidSettingError(ConfigError):
    """Raised when an environment variable holds an unsupported value."""

    def __init__(self, name: str, value: str, allowed: list[str]) -> None:
        super().__init__(
            f"Invalid value {value!r} for {name}; expected one of {', '.join(allowed)}"
        )


class SchemaMode(str, Enum):
    """How the marketplace collections are brought into shape at startup."""

    RECONCILE = "reconcile"
    IMPORT = "import"


@dataclass(frozen=True, slots=True)
class AdminCredentials:
    """The one-time bootstrap secret for the first administrator."""

    email: str
    password: str = field(repr=False)


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `MARKETBASE_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `MARKETBASE_DB_URL` is not set.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


def get_admin_credentials() -> AdminCredentials:
    """Get the bootstrap administrator credentials from the environment.

    Raises:
        AdminCredentialsNotSetError: If either variable is missing or empty.
    """
    email = os.environ.get(ADMIN_EMAIL_ENV, "").strip()
    password = os.environ.get(ADMIN_PASSWORD_ENV, "")
    if not email or not password:
        raise AdminCredentialsNotSetError
    return AdminCredentials(email=email, password=password)


def get_schema_mode() -> SchemaMode:
    """Get the startup schema mode (defaults to reconcile)."""
    raw = os.environ.get(SCHEMA_MODE_ENV, SchemaMode.RECONCILE.value).strip().lower()
    try:
        return SchemaMode(raw)
    except ValueError as e:
        raise InvalidSettingError(
            SCHEMA_MODE_ENV, raw, [m.value for m in SchemaMode]
        ) from e


def get_schema_policy() -> str:
    """Get the raw reconciliation policy name (defaults to ``rebuild``).

    Validation happens where the policy enum lives, in the service layer.
    """
    return os.environ.get(SCHEMA_POLICY_ENV, "rebuild").strip().lower()


def get_schema_file_candidates() -> list[Path]:
    """Paths tried, in order, when importing the bundled schema file."""
    configured = os.environ.get(SCHEMA_FILE_ENV)
    primary = Path(configured) if configured else DEFAULT_SCHEMA_FILE
    candidates = [primary]
    if primary != FALLBACK_SCHEMA_FILE:
        candidates.append(FALLBACK_SCHEMA_FILE)
    return candidates


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO = sys.stdout
) -> Config:
    """Build an Alembic `Config` object for the record store tables.

    Sets only Alembic "main" options:
    - `sqlalchemy.url` → the database URL you pass
    - `script_location` → the packaged Alembic scripts

    Args:
        db_url: SQLAlchemy database URL (e.g., `sqlite:///:memory:`). Can be
            `None` only in contexts where Alembic won't need to connect.
        stdout: Text stream Alembic will write status lines to.

    Returns:
        An `alembic.config.Config` pointing to the migration scripts.
    """
    cfg = Config(stdout=stdout)
    if db_url is not None:
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url)
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("marketbase.adapters.db.alembic")),
    )
    return cfg
