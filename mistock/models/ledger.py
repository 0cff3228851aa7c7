"""
Ledger model - sale, posting and requisition lines plus derived money totals.

Design principles:
- Aggregates are computed from the current line set on every read; there is
  no stored subtotal/total that could drift from the lines
- Non-active lines stay on the ledger for audit and contribute 0 to revenue
- Complimentary lines feed a separate "given away" tally (value and cost)
- Once finalized the ledger is immutable history
- All amounts in integer cents
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import computed_field

from mistock.core.errors import InsufficientAvailability, LedgerFinalized, NotFoundError
from mistock.models import line_item as line_ops
from mistock.models.base import DocumentModel, utcnow
from mistock.models.line_item import AvailableItem, LineItem, LineStatus
from mistock.utils.money import floor_zero, percent_of, sum_cents
from mistock.utils.validation import validate_non_negative_amount, validate_quantity


class LedgerKind(str, Enum):
    SALE = "sale"
    POSTING = "posting"
    REQUISITION = "requisition"


class Ledger(DocumentModel):
    """
    A mutable list of lines scoped to one in-progress transaction.

    Invariants:
    - subtotal_cents == sum of line_total_cents over active lines
    - total_cents == max(0, subtotal - discount + tax)
    - finalized ledgers reject every mutation

    Mutating methods never modify ``self``: they return a new Ledger, so the
    caller commits only after the whole operation succeeded.
    """
    kind: LedgerKind = LedgerKind.SALE
    lines: List[LineItem] = []
    tax_rate_percent: Decimal = Decimal("0")
    discount_cents: int = 0
    notes: Optional[str] = None
    finalized: bool = False
    finalized_at: Optional[datetime] = None

    # ===== DERIVED AGGREGATES =====

    @computed_field
    @property
    def subtotal_cents(self) -> int:
        return sum_cents(line.line_total_cents for line in self.active_lines)

    @computed_field
    @property
    def tax_cents(self) -> int:
        return percent_of(self.subtotal_cents, self.tax_rate_percent)

    @computed_field
    @property
    def total_cents(self) -> int:
        return floor_zero(self.subtotal_cents - self.discount_cents + self.tax_cents)

    @computed_field
    @property
    def complimentary_cents(self) -> int:
        return sum_cents(line.line_total_cents for line in self._with_status(LineStatus.COMPLIMENTARY))

    @computed_field
    @property
    def complimentary_cost_cents(self) -> int:
        return sum_cents(
            line.cost_cents for line in self._with_status(LineStatus.COMPLIMENTARY)
            if line.cost_cents is not None
        )

    @property
    def active_lines(self) -> List[LineItem]:
        return self._with_status(LineStatus.ACTIVE)

    def _with_status(self, status: LineStatus) -> List[LineItem]:
        return [line for line in self.lines if line.status == status]

    # ===== LOOKUPS =====

    def get_line(self, line_id: str) -> LineItem:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise NotFoundError(f"Line {line_id} not found on ledger {self.id}")

    def find_active_by_sku(self, sku: str) -> Optional[LineItem]:
        for line in self.lines:
            if line.sku == sku and line.is_active:
                return line
        return None

    # ===== MUTATIONS (return a new ledger) =====

    def _ensure_open(self) -> None:
        if self.finalized:
            raise LedgerFinalized(f"Ledger {self.id} is finalized and cannot be changed")

    def _replace_line(self, updated: LineItem) -> "Ledger":
        new_lines = [updated if line.id == updated.id else line for line in self.lines]
        return self.model_copy(update={"lines": new_lines})

    def add_line(self, item: AvailableItem, quantity: int) -> "Ledger":
        """
        Add ``quantity`` of ``item``.

        Merges into the existing active line for the same SKU. Rejects with
        InsufficientAvailability when the merged quantity would exceed the
        item's available quantity.
        """
        self._ensure_open()
        validate_quantity(quantity)

        existing = self.find_active_by_sku(item.sku)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > item.available_quantity:
            raise InsufficientAvailability(
                f"Only {item.available_quantity} of {item.sku} available, requested {requested}"
            )

        if existing is not None:
            return self._replace_line(
                line_ops.with_quantity(existing, requested, ceiling=item.available_quantity)
            )
        return self.model_copy(update={"lines": self.lines + [line_ops.new_line(item, quantity)]})

    def set_quantity(self, line_id: str, quantity: int) -> "Ledger":
        """qty <= 0 removes the line; otherwise bounded by the line's stock ceiling."""
        self._ensure_open()
        line = self.get_line(line_id)
        line_ops.require_active(line, "change quantity of")
        if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity <= 0:
            return self.remove_line(line_id)

        updated = line_ops.with_quantity(line, quantity)
        if line_ops.exceeds_stock(updated):
            raise InsufficientAvailability(
                f"Only {updated.available_quantity} of {updated.sku} available, requested {quantity}"
            )
        return self._replace_line(updated)

    def remove_line(self, line_id: str) -> "Ledger":
        """Drop an active line entirely. Voided/cancelled/complimentary lines stay for audit."""
        self._ensure_open()
        line_ops.require_active(self.get_line(line_id), "remove")
        return self.model_copy(update={"lines": [line for line in self.lines if line.id != line_id]})

    def void_line(self, line_id: str, reason: Optional[str]) -> "Ledger":
        self._ensure_open()
        return self._replace_line(line_ops.void(self.get_line(line_id), reason))

    def cancel_line(self, line_id: str, reason: Optional[str]) -> "Ledger":
        self._ensure_open()
        return self._replace_line(line_ops.cancel(self.get_line(line_id), reason))

    def mark_complimentary(self, line_id: str, reason: Optional[str]) -> "Ledger":
        self._ensure_open()
        return self._replace_line(line_ops.mark_complimentary(self.get_line(line_id), reason))

    def apply_discount(self, line_id: str, percent) -> "Ledger":
        self._ensure_open()
        return self._replace_line(line_ops.apply_discount(self.get_line(line_id), percent))

    def set_discount(self, amount_cents: int) -> "Ledger":
        self._ensure_open()
        validate_non_negative_amount(amount_cents, "Discount")
        return self.model_copy(update={"discount_cents": amount_cents})

    def finalize(self) -> "Ledger":
        self._ensure_open()
        return self.model_copy(update={"finalized": True, "finalized_at": utcnow()})

    def snapshot(self) -> "Ledger":
        """Deep, independent copy used as evidence of what was requested."""
        return self.model_copy(deep=True)
