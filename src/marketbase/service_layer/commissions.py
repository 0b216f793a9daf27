"""Commission calculation for sales.

`compute_commissions` is the pure calculation. `CommissionCalculator` resolves
the shop and affiliate a pending sale points at and writes the derived fields
onto it. `CommissionHook` adapts the calculator to the record store's
before-create hook point, for sales created without going through the
`CreateSale` command.

Resolution rules:
- no shop reference: nothing is computed and nothing fails;
- unknown shop: `RecordNotFoundError`, so the sale is not persisted;
- unknown affiliate: the affiliate commission is skipped, the sale proceeds.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from marketbase.domain.money import percent_of, to_decimal
from marketbase.domain.schema import AFFILIATES, DERIVED_SALE_FIELDS, SALES, SHOPS
from marketbase.interfaces.record_store import (
    Collection,
    CollectionNotFoundError,
    Record,
    RecordHooks,
    RecordStore,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Commissions:
    """Derived amounts of a sale."""

    platform_fee: Decimal
    affiliate_commission: Decimal | None = None


def compute_commissions(
    sale: Mapping[str, Any], shop: Record, affiliate: Record | None = None
) -> Commissions:
    """Compute the platform fee and the affiliate commission of a sale.

    Both are ``amount * commission_rate / 100`` rounded to cents, using the
    shop's and the affiliate's rate respectively.

    Raises:
        InvalidAmountError: If the amount or a rate is not numeric.
    """
    amount = to_decimal(sale.get("amount"), "amount")
    platform_fee = percent_of(
        amount, to_decimal(shop.get("commission_rate"), "commission_rate")
    )
    affiliate_commission = None
    if affiliate is not None:
        affiliate_commission = percent_of(
            amount, to_decimal(affiliate.get("commission_rate"), "commission_rate")
        )
    return Commissions(platform_fee, affiliate_commission)


class CommissionCalculator:
    """Fill in the derived fields of a pending sale."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def apply(self, sale: dict[str, Any]) -> Commissions | None:
        """Compute commissions and write them onto `sale` in place.

        Client-supplied derived values are always dropped first.

        Returns:
            The commissions, or None when the sale has no shop.

        Raises:
            RecordNotFoundError: If the referenced shop does not exist.
            CollectionNotFoundError: If the shops collection does not exist.
        """
        for name in DERIVED_SALE_FIELDS:
            sale.pop(name, None)

        if not (shop_id := sale.get("shop")):
            logger.debug("Sale has no shop; commissions not computed")
            return None

        shop = self.store.require_record(SHOPS, shop_id)
        affiliate = self._find_affiliate(sale.get("affiliate"))

        result = compute_commissions(sale, shop, affiliate)
        sale["platform_fee"] = result.platform_fee
        if result.affiliate_commission is not None:
            sale["affiliate_commission"] = result.affiliate_commission
        return result

    def _find_affiliate(self, affiliate_id: str | None) -> Record | None:
        if not affiliate_id:
            return None
        try:
            affiliate = self.store.get_record(AFFILIATES, affiliate_id)
        except CollectionNotFoundError:
            affiliate = None
        if affiliate is None:
            logger.debug(
                "Affiliate %s not found; affiliate commission skipped", affiliate_id
            )
        return affiliate


class CommissionHook:  # pylint: disable=too-few-public-methods
    """Before-create hook for the sales collection."""

    def __call__(
        self, store: RecordStore, collection: Collection, data: dict[str, Any]
    ) -> None:
        CommissionCalculator(store).apply(data)


def register_commission_hook(hooks: RecordHooks) -> bool:
    """Register `CommissionHook` on `sales` unless it already is.

    Returns:
        True if the hook was registered by this call.
    """
    if any(isinstance(h, CommissionHook) for h in hooks.before_create_hooks(SALES)):
        return False
    hooks.on_before_create(SALES, CommissionHook())
    logger.debug("Commission hook registered on %s", SALES)
    return True
