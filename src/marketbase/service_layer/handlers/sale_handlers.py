"""Handlers relating to sales."""

from collections.abc import Callable
from typing import Any

from marketbase.domain.money import to_decimal
from marketbase.domain.schema import SALES
from marketbase.interfaces.record_store import Record
from marketbase.interfaces.unit_of_work import AbstractUnitOfWork
from marketbase.service_layer import commands
from marketbase.service_layer.commissions import CommissionCalculator


def create_sale(cmd: commands.CreateSale, uow: AbstractUnitOfWork) -> Record:
    """Record a sale with its platform fee and affiliate commission.

    Commissions are computed here, so the store's before-create hooks are not
    run a second time.
    """
    data: dict[str, Any] = {
        "shop": cmd.shop,
        "product": cmd.product,
        "affiliate": cmd.affiliate,
    }
    data = {name: value for name, value in data.items() if value}
    if cmd.amount is not None:
        data["amount"] = to_decimal(cmd.amount, "amount")

    with uow:
        CommissionCalculator(uow.store).apply(data)
        record = uow.store.create_record(SALES, data, run_hooks=False)
        uow.commit()
    return record


COMMAND_HANDLERS: dict[type, Callable[..., Any]] = {
    commands.CreateSale: create_sale,
}
