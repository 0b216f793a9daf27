"""marketbase sale CLI."""

from __future__ import annotations

import click
import click_extra as clickx

from marketbase.service_layer import commands

from .helpers import cli_errors, load_container, success


@click.group(cls=clickx.ExtraGroup)
def sale() -> None:
    """Sale commands."""


@sale.command()
@click.option("--shop", required=True, help="Id of the shop the sale belongs to.")
@click.option("--product", required=True, help="Id of the product sold.")
@click.option("--affiliate", default=None, help="Id of the referring affiliate.")
@click.option("--amount", required=True, help="Sale amount, e.g. 1000 or 19.99.")
def create(shop: str, product: str, affiliate: str | None, amount: str) -> None:
    """Record a sale and print its computed commissions."""
    container = load_container()
    with cli_errors():
        record = container.message_bus.handle(
            commands.CreateSale(
                shop=shop, product=product, affiliate=affiliate, amount=amount
            )
        )
    click.echo(f"id                   : {record.id}")
    click.echo(f"amount               : {record.get('amount')}")
    click.echo(f"platform_fee         : {record.get('platform_fee')}")
    click.echo(f"affiliate_commission : {record.get('affiliate_commission', '-')}")
    success("Sale recorded")
