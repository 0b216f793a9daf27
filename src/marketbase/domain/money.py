"""Fixed-point money helpers.

Amounts and rates are handled as :class:`decimal.Decimal`. Rates are whole
percentages (``5`` means 5%). Every derived amount is quantized to cents with
``ROUND_HALF_UP`` so that the same inputs always produce the same stored value.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidAmountError

CENT = Decimal("0.01")
HUNDRED = Decimal(100)
ZERO = Decimal(0)


def to_decimal(value: object, field_name: str = "value") -> Decimal:
    """Convert a stored number to ``Decimal``.

    ``None`` and empty strings count as zero. Floats go through ``str`` so that
    ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        InvalidAmountError: If the value is not numeric (booleans included).
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise InvalidAmountError(field_name, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmountError(field_name, value) from e
    else:
        raise InvalidAmountError(field_name, value)
    if not result.is_finite():
        raise InvalidAmountError(field_name, value)
    return result


def quantize_cents(amount: Decimal) -> Decimal:
    """Round an amount to cents, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Return ``amount * rate / 100`` rounded to cents.

    >>> percent_of(Decimal("1000"), Decimal("5"))
    Decimal('50.00')
    """
    return quantize_cents(amount * rate / HUNDRED)
