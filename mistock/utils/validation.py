"""Input validation shared by the ledger, workflow and settlement services."""
from decimal import Decimal, InvalidOperation
from typing import Optional

from mistock.core.errors import (
    InvalidAmount,
    InvalidDiscount,
    InvalidQuantity,
    MissingReason,
)
from mistock.utils.money import Number, to_decimal


def validate_quantity(quantity: int) -> None:
    """
    Validate a requested line quantity.

    Rules:
    - must be an integer (bool is rejected)
    - must be positive
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(f"Quantity must be a whole number, got {quantity!r}")
    if quantity <= 0:
        raise InvalidQuantity(f"Quantity must be positive, got {quantity}")


def validate_discount_percent(percent: Number) -> Decimal:
    """
    Validate a per-line discount.

    Rules:
    - 0 < percent <= 100
    """
    try:
        value = to_decimal(percent)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidDiscount(f"Discount must be a number, got {percent!r}")

    if not value.is_finite() or value <= 0 or value > 100:
        raise InvalidDiscount(f"Discount must be in (0, 100], got {percent}")
    return value


def validate_reason(reason: Optional[str], action: str) -> str:
    """Void, cancel and complimentary all need a non-blank reason."""
    if reason is None or not reason.strip():
        raise MissingReason(f"A reason is required to {action} an item")
    return reason.strip()


def validate_positive_amount(amount_cents: int, what: str = "Amount") -> None:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidAmount(f"{what} must be integer cents, got {amount_cents!r}")
    if amount_cents <= 0:
        raise InvalidAmount(f"{what} must be positive, got {amount_cents}")


def validate_non_negative_amount(amount_cents: int, what: str = "Amount") -> None:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidAmount(f"{what} must be integer cents, got {amount_cents!r}")
    if amount_cents < 0:
        raise InvalidAmount(f"{what} has negative value: {amount_cents}")


def validate_tax_rate(percent: Number) -> Decimal:
    try:
        value = to_decimal(percent)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Tax rate must be a number, got {percent!r}")
    if not value.is_finite() or value < 0 or value > 100:
        raise InvalidAmount(f"Tax rate must be in [0, 100], got {percent}")
    return value
