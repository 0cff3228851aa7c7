from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from mistock.models.purchase_request import PaymentMethod, PurchaseRequest, RequestStatus
from mistock.schemas.ledger import LedgerResponse


class RequestSubmit(BaseModel):
    ledger_id: str
    customer_name: Optional[str] = None


class ChargesUpdate(BaseModel):
    amount_cents: int


class PaymentComplete(BaseModel):
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class PurchaseRequestResponse(BaseModel):
    id: str
    status: RequestStatus
    ledger_snapshot: LedgerResponse
    subtotal_cents: int
    charges_cents: int
    payable_cents: int
    customer_name: Optional[str] = None
    submitted_by: str
    unlocked_by: Optional[str] = None
    unlocked_at: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    version: int
    created_at: datetime

    @classmethod
    def from_request(cls, request: PurchaseRequest) -> "PurchaseRequestResponse":
        return cls(
            id=request.id,
            status=request.status,
            ledger_snapshot=LedgerResponse.from_ledger(request.ledger_snapshot),
            subtotal_cents=request.subtotal_cents,
            charges_cents=request.charges_cents,
            payable_cents=request.payable_cents,
            customer_name=request.customer_name,
            submitted_by=request.submitted_by,
            unlocked_by=request.unlocked_by,
            unlocked_at=request.unlocked_at,
            payment_method=request.payment_method,
            paid_by=request.paid_by,
            paid_at=request.paid_at,
            transaction_id=request.transaction_id,
            version=request.version,
            created_at=request.created_at,
        )
