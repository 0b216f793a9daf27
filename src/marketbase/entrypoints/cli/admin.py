"""marketbase admin CLI."""

from __future__ import annotations

import click
import click_extra as clickx

from marketbase import config
from marketbase.service_layer import commands

from .helpers import cli_errors, load_container, success


@click.group(cls=clickx.ExtraGroup)
def admin() -> None:
    """Administrator account commands."""


@admin.command()
def ensure() -> None:
    """Create the first administrator from MARKETBASE_ADMIN_EMAIL/PASSWORD.

    Does nothing when an administrator already exists.
    """
    container = load_container()
    with cli_errors():
        credentials = config.get_admin_credentials()
        created = container.message_bus.handle(
            commands.EnsureAdmin(email=credentials.email, password=credentials.password)
        )
    if created:
        success(f"Administrator {credentials.email} created")
    else:
        success("Administrator already present")
