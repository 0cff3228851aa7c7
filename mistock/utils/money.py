"""
Money and quantity arithmetic.

All amounts are integer minor units (cents/kobo). Percentages are Decimal.
Whenever a computation lands on a fractional cent it is rounded half-up,
so 0.5 cent always goes up.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

Number = Union[int, float, str, Decimal]

HUNDRED = Decimal(100)


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_cents(value: Number) -> int:
    """Round a (possibly fractional) cent amount half-up to whole cents."""
    return int(to_decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount: Number) -> int:
    """Major units (e.g. "12.50") to integer cents."""
    return round_cents(to_decimal(amount) * HUNDRED)


def from_cents(cents: int) -> Decimal:
    """Integer cents back to a 2dp Decimal in major units."""
    return (Decimal(cents) / HUNDRED).quantize(Decimal("0.01"))


def percent_of(amount_cents: int, percent: Number) -> int:
    """``percent``% of ``amount_cents``, rounded to whole cents."""
    return round_cents(Decimal(amount_cents) * to_decimal(percent) / HUNDRED)


def line_total(
    unit_price_cents: int,
    quantity: int,
    discount_percent: Optional[Number] = None
) -> int:
    """unit_price * quantity * (1 - discount_percent/100), rounded once."""
    gross = Decimal(unit_price_cents) * quantity
    if discount_percent:
        gross = gross * (HUNDRED - to_decimal(discount_percent)) / HUNDRED
    return round_cents(gross)


def sum_cents(amounts: Iterable[int]) -> int:
    return sum(amounts, 0)


def floor_zero(amount_cents: int) -> int:
    return max(0, amount_cents)


def format_amount(cents: int, symbol: str = "₦") -> str:
    """Display helper: 150050 -> '₦1,500.50'."""
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{abs(from_cents(cents)):,.2f}"
