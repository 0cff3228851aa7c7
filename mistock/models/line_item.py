"""
Line items and their status state machine.

    active ──void──────────► voided
       │ ───cancel────────► cancelled
       └───complimentary──► complimentary

Every state except ``active`` is terminal for the line within its
transaction: no further transition, quantity change or discount is
accepted. Lines are frozen; every operation here returns a new line and
leaves the input untouched, so a failed operation never half-applies.
"""
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from mistock.core.errors import InvalidTransition
from mistock.models.base import ObjectIdStr, new_id
from mistock.utils.money import line_total
from mistock.utils.validation import (
    validate_discount_percent,
    validate_quantity,
    validate_reason,
)


class LineStatus(str, Enum):
    ACTIVE = "active"
    VOIDED = "voided"
    CANCELLED = "cancelled"
    COMPLIMENTARY = "complimentary"


ALLOWED_TRANSITIONS: Dict[LineStatus, FrozenSet[LineStatus]] = {
    LineStatus.ACTIVE: frozenset({
        LineStatus.VOIDED,
        LineStatus.CANCELLED,
        LineStatus.COMPLIMENTARY,
    }),
    LineStatus.VOIDED: frozenset(),
    LineStatus.CANCELLED: frozenset(),
    LineStatus.COMPLIMENTARY: frozenset(),
}

# Lines shown struck through in read views
STRUCK_THROUGH = frozenset({LineStatus.VOIDED, LineStatus.CANCELLED})

# Preset reasons offered by the sales screens; any non-blank text is accepted.
VOID_REASONS = (
    "Customer changed mind",
    "Kitchen/preparation error",
    "Item not available",
    "Quality issue",
    "Staff error",
    "Other",
)

CANCEL_REASONS = (
    "Customer request",
    "Out of stock",
    "Preparation time too long",
    "Price dispute",
    "Other",
)

COMPLIMENTARY_REASONS = (
    "Customer complaint",
    "Promotional offer",
    "Staff courtesy",
    "Quality compensation",
    "Management decision",
    "Other",
)


class AvailableItem(BaseModel):
    """Inventory read collaborator's view of a sellable/postable item."""
    sku: str
    name: str
    available_quantity: int
    unit_price_cents: int
    cost_price_cents: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class LineItem(BaseModel):
    id: ObjectIdStr = Field(default_factory=new_id)
    sku: str
    name: str = ""
    unit_price_cents: int
    quantity: int
    status: LineStatus = LineStatus.ACTIVE
    reason: Optional[str] = None
    discount_percent: Optional[Decimal] = None
    available_quantity: Optional[int] = None  # stock ceiling captured when added
    cost_price_cents: Optional[int] = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @computed_field
    @property
    def line_total_cents(self) -> int:
        return line_total(self.unit_price_cents, self.quantity, self.discount_percent)

    @property
    def is_active(self) -> bool:
        return self.status == LineStatus.ACTIVE

    @property
    def gross_cents(self) -> int:
        """Value before any line discount."""
        return line_total(self.unit_price_cents, self.quantity)

    @property
    def discount_amount_cents(self) -> int:
        return self.gross_cents - self.line_total_cents

    @property
    def cost_cents(self) -> Optional[int]:
        if self.cost_price_cents is None:
            return None
        return self.cost_price_cents * self.quantity


def new_line(item: AvailableItem, quantity: int) -> LineItem:
    validate_quantity(quantity)
    return LineItem(
        sku=item.sku,
        name=item.name,
        unit_price_cents=item.unit_price_cents,
        quantity=quantity,
        available_quantity=item.available_quantity,
        cost_price_cents=item.cost_price_cents,
    )


def require_active(line: LineItem, action: str) -> None:
    if not line.is_active:
        raise InvalidTransition(
            f"Cannot {action} line {line.id}: status is '{line.status.value}'"
        )


def transition(line: LineItem, target: LineStatus, reason: Optional[str]) -> LineItem:
    """Move a line to a terminal status. The reason is mandatory."""
    if target not in ALLOWED_TRANSITIONS[line.status]:
        raise InvalidTransition(
            f"Line {line.id} cannot go from '{line.status.value}' to '{target.value}'"
        )
    cleaned = validate_reason(reason, _ACTION_NAMES[target])
    return line.model_copy(update={"status": target, "reason": cleaned})


def void(line: LineItem, reason: Optional[str]) -> LineItem:
    return transition(line, LineStatus.VOIDED, reason)


def cancel(line: LineItem, reason: Optional[str]) -> LineItem:
    return transition(line, LineStatus.CANCELLED, reason)


def mark_complimentary(line: LineItem, reason: Optional[str]) -> LineItem:
    return transition(line, LineStatus.COMPLIMENTARY, reason)


def apply_discount(line: LineItem, percent) -> LineItem:
    require_active(line, "discount")
    value = validate_discount_percent(percent)
    return line.model_copy(update={"discount_percent": value})


def with_quantity(line: LineItem, quantity: int, ceiling: Optional[int] = None) -> LineItem:
    """
    Return the line at a new quantity.

    ``ceiling`` overrides the stock ceiling captured on the line. Exceeding
    it is reported by the caller, which knows which error to raise; here we
    only guard the quantity itself.
    """
    require_active(line, "change quantity of")
    validate_quantity(quantity)
    update = {"quantity": quantity}
    if ceiling is not None:
        update["available_quantity"] = ceiling
    return line.model_copy(update=update)


def exceeds_stock(line: LineItem) -> bool:
    return line.available_quantity is not None and line.quantity > line.available_quantity


_ACTION_NAMES = {
    LineStatus.VOIDED: "void",
    LineStatus.CANCELLED: "cancel",
    LineStatus.COMPLIMENTARY: "mark complimentary",
}
