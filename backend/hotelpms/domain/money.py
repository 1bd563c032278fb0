"""
hotelpms/domain/money.py

Money/Tax calculator - pure functions, no dependencies.

Amounts are ``Decimal`` values quantized to the currency minor unit (two
fractional digits for every supported currency).
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from hotelpms.domain.errors import InvalidAmount

MINOR_UNIT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

Numeric = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class LineItemTotals:
    """Computed amounts for one charge"""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def to_money(value: Numeric) -> Decimal:
    """Convert to a Decimal at minor-unit precision.

    Floats go through ``str`` so binary representation noise is dropped.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Numeric]) -> Decimal:
    """Sum amounts at minor-unit precision."""
    total = ZERO
    for value in values:
        total += to_money(value)
    return to_money(total)


def tax_on(amount: Numeric, tax_rate_percent: Numeric) -> Decimal:
    """Tax for ``amount`` at ``tax_rate_percent``."""
    rate = Decimal(str(tax_rate_percent))
    if rate < 0:
        raise InvalidAmount(f"Tax rate cannot be negative: {tax_rate_percent}")
    return to_money(to_money(amount) * rate / HUNDRED)


def line_item_totals(quantity: int, unit_price: Numeric, tax_rate_percent: Numeric) -> LineItemTotals:
    """
    Compute subtotal, tax and total for a line item.

    Args:
        quantity: number of units, at least 1
        unit_price: price per unit, non-negative
        tax_rate_percent: tax rate in percent, non-negative

    Raises:
        InvalidAmount: on quantity < 1, negative price or negative tax rate
    """
    if quantity is None or int(quantity) != quantity or quantity < 1:
        raise InvalidAmount(f"Quantity must be a whole number of at least 1: {quantity}")
    price = to_money(unit_price)
    if price < 0:
        raise InvalidAmount(f"Unit price cannot be negative: {unit_price}")

    subtotal = to_money(price * int(quantity))
    tax_amount = tax_on(subtotal, tax_rate_percent)
    return LineItemTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=to_money(subtotal + tax_amount),
    )


def room_total_rate(base_rate: Numeric, tax_rate_percent: Numeric) -> Decimal:
    """All-in nightly rate: base rate plus tax."""
    rate = to_money(base_rate)
    if rate < 0:
        raise InvalidAmount(f"Base rate cannot be negative: {base_rate}")
    return to_money(rate + tax_on(rate, tax_rate_percent))


__all__ = [
    "MINOR_UNIT",
    "ZERO",
    "LineItemTotals",
    "to_money",
    "sum_money",
    "tax_on",
    "line_item_totals",
    "room_total_rate",
]
