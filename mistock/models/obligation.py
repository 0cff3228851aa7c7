"""
Obligation model - outstanding balances owed by customers (receivables) or
to suppliers (creditors), settled over time.

Design principles:
- One obligation per recognized balance (credit sale, goods received unpaid)
- Settlement records are append-only and never edited or removed
- remaining balance and status are derived from the records on every read
- Obligations are never deleted; "Fully Paid" is terminal
- All amounts in integer cents
"""
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from mistock.models.base import DocumentModel, ObjectIdStr, new_id, utcnow
from mistock.utils.money import floor_zero, sum_cents


class ObligationKind(str, Enum):
    RECEIVABLE = "receivable"   # customer owes us
    CREDITOR = "creditor"       # we owe a supplier


class ObligationStatus(str, Enum):
    UNSETTLED = "Unsettled"
    PARTIALLY_PAID = "Partially Paid"
    FULLY_PAID = "Fully Paid"

    def label(self, kind: ObligationKind) -> str:
        """Creditor screens call an untouched balance "Unpaid"."""
        if self is ObligationStatus.UNSETTLED and kind == ObligationKind.CREDITOR:
            return "Unpaid"
        return self.value


class SettlementMethod(str, Enum):
    CASH = "Cash"
    POS = "POS"
    TRANSFER = "Transfer"
    CHEQUE = "Cheque"


class SettlementRecord(BaseModel):
    """One payment event against an obligation. Immutable."""
    id: ObjectIdStr = Field(default_factory=new_id)
    amount_cents: int
    recorded_at: datetime = Field(default_factory=utcnow)
    method: SettlementMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


def derive_status(original_amount_cents: int, remaining_balance_cents: int) -> ObligationStatus:
    if remaining_balance_cents <= 0:
        return ObligationStatus.FULLY_PAID
    if remaining_balance_cents < original_amount_cents:
        return ObligationStatus.PARTIALLY_PAID
    return ObligationStatus.UNSETTLED


def remaining_balance(original_amount_cents: int, settlements: Sequence[SettlementRecord]) -> int:
    return floor_zero(original_amount_cents - sum_cents(s.amount_cents for s in settlements))


class SettlementHistory:
    """
    Read-only view over an obligation's settlements in recording order.

    Iterating is lazy and can be repeated; each ``iter()`` starts from the
    first record again.
    """

    def __init__(self, records: Sequence[SettlementRecord]):
        self._records = tuple(records)

    def __iter__(self) -> Iterator[SettlementRecord]:
        for record in self._records:
            yield record

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"SettlementHistory({len(self._records)} records)"


class SettlementObligation(DocumentModel):
    """
    Balance owed by/to ``counterparty_name``.

    Invariants:
    - remaining_balance_cents == max(0, original - sum(settlements))
    - status is a pure function of remaining_balance_cents
    - settlements only grow
    """
    kind: ObligationKind
    counterparty_name: str
    cashier_name: Optional[str] = None
    original_amount_cents: int
    settlements: List[SettlementRecord] = []
    description: str = ""
    source_transaction_id: Optional[str] = None

    @computed_field
    @property
    def total_paid_cents(self) -> int:
        return sum_cents(s.amount_cents for s in self.settlements)

    @computed_field
    @property
    def remaining_balance_cents(self) -> int:
        return remaining_balance(self.original_amount_cents, self.settlements)

    @computed_field
    @property
    def status(self) -> ObligationStatus:
        return derive_status(self.original_amount_cents, self.remaining_balance_cents)

    @property
    def status_label(self) -> str:
        return self.status.label(self.kind)

    @property
    def is_fully_paid(self) -> bool:
        return self.status == ObligationStatus.FULLY_PAID

    def with_settlement(self, record: SettlementRecord) -> "SettlementObligation":
        """New obligation with ``record`` appended; ``self`` is unchanged."""
        return self.model_copy(update={"settlements": self.settlements + [record]})

    def history(self) -> SettlementHistory:
        return SettlementHistory(self.settlements)
