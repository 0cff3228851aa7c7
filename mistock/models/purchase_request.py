"""
Purchase request - a submitted ledger snapshot waiting for approval and payment.

    pending ──unlock──► unlocked ──pay──► paid

Status only moves forward. Charges are admin-set while pending or unlocked;
the snapshot never changes after submission.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import computed_field

from mistock.core.errors import InvalidTransition, NotUnlocked
from mistock.models.base import DocumentModel, utcnow
from mistock.models.ledger import Ledger
from mistock.utils.validation import validate_non_negative_amount


class RequestStatus(str, Enum):
    PENDING = "pending"
    UNLOCKED = "unlocked"
    PAID = "paid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"          # POS terminal
    TRANSFER = "transfer"
    MOBILE = "mobile"
    CREDIT = "credit"      # settled later through a receivable

    @property
    def is_deferred(self) -> bool:
        return self is PaymentMethod.CREDIT


class PurchaseRequest(DocumentModel):
    ledger_snapshot: Ledger
    charges_cents: int = 0
    status: RequestStatus = RequestStatus.PENDING
    customer_name: Optional[str] = None
    submitted_by: str

    unlocked_by: Optional[str] = None
    unlocked_at: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None

    @computed_field
    @property
    def subtotal_cents(self) -> int:
        return self.ledger_snapshot.total_cents

    @computed_field
    @property
    def payable_cents(self) -> int:
        return self.subtotal_cents + self.charges_cents

    def with_charges(self, amount_cents: int) -> "PurchaseRequest":
        validate_non_negative_amount(amount_cents, "Charges")
        if self.status == RequestStatus.PAID:
            raise InvalidTransition(f"Request {self.id} is paid; charges are locked")
        return self.model_copy(update={"charges_cents": amount_cents})

    def unlocked(self, by: str) -> "PurchaseRequest":
        """pending -> unlocked. Returns ``self`` unchanged when already unlocked."""
        if self.status == RequestStatus.UNLOCKED:
            return self
        if self.status != RequestStatus.PENDING:
            raise InvalidTransition(
                f"Request {self.id} cannot be unlocked from '{self.status.value}'"
            )
        return self.model_copy(update={
            "status": RequestStatus.UNLOCKED,
            "unlocked_by": by,
            "unlocked_at": utcnow(),
        })

    def paid(self, method: PaymentMethod, by: str, transaction_id: str) -> "PurchaseRequest":
        if self.status == RequestStatus.PENDING:
            raise NotUnlocked(f"Request {self.id} must be unlocked before payment")
        if self.status != RequestStatus.UNLOCKED:
            raise InvalidTransition(
                f"Request {self.id} cannot be paid from '{self.status.value}'"
            )
        return self.model_copy(update={
            "status": RequestStatus.PAID,
            "payment_method": method,
            "paid_by": by,
            "paid_at": utcnow(),
            "transaction_id": transaction_id,
        })
