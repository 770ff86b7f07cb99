"""Monetary arithmetic in øre precision.

Amounts are persisted as floats (protean ``Float`` fields) but every
calculation goes through ``Decimal`` quantized to two places, so sums of
line totals match cart and order totals exactly.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal(100)


def to_money(value) -> Decimal:
    """Convert a float, int, str or Decimal into a two-place Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a monetary amount: {value!r}") from None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def as_float(amount: Decimal) -> float:
    return float(to_money(amount))


def apply_percentage(amount: Decimal, percentage) -> Decimal:
    """Price after taking ``percentage`` percent off ``amount``."""
    factor = (HUNDRED - Decimal(str(percentage))) / HUNDRED
    return to_money(amount * factor)


def percentage_off(original: Decimal, price: Decimal) -> int:
    """Whole-number percentage gap between ``original`` and ``price`` (half up)."""
    if original <= 0:
        return 0
    ratio = (original - price) / original * HUNDRED
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
