from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from mistock.models.ledger import Ledger, LedgerKind
from mistock.models.line_item import AvailableItem, LineItem, LineStatus, STRUCK_THROUGH
from mistock.models.purchase_request import PaymentMethod
from mistock.models.transaction import FinalizedTransaction, TransactionSource


class LedgerCreate(BaseModel):
    """Request body to open a ledger. Tax rate defaults to the configured rate."""
    kind: LedgerKind = LedgerKind.SALE
    tax_rate_percent: Optional[Decimal] = None
    notes: Optional[str] = None


class LineAdd(BaseModel):
    item: AvailableItem
    quantity: int


class QuantityUpdate(BaseModel):
    quantity: int


class LineReason(BaseModel):
    """Body for void / cancel / complimentary. A missing reason is rejected by the ledger."""
    reason: Optional[str] = None


class LineDiscount(BaseModel):
    percent: Decimal


class LedgerDiscount(BaseModel):
    amount_cents: int


class SaleComplete(BaseModel):
    payment_method: PaymentMethod
    customer_name: Optional[str] = None
    amount_received_cents: Optional[int] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class LineView(BaseModel):
    """Read projection of a line. Voided and cancelled lines render struck through."""
    id: str
    sku: str
    name: str
    unit_price_cents: int
    quantity: int
    line_total_cents: int
    status: LineStatus
    reason: Optional[str] = None
    discount_percent: Optional[Decimal] = None
    discount_amount_cents: int = 0
    struck_through: bool = False

    @classmethod
    def from_line(cls, line: LineItem) -> "LineView":
        return cls(
            id=line.id,
            sku=line.sku,
            name=line.name,
            unit_price_cents=line.unit_price_cents,
            quantity=line.quantity,
            line_total_cents=line.line_total_cents,
            status=line.status,
            reason=line.reason,
            discount_percent=line.discount_percent,
            discount_amount_cents=line.discount_amount_cents,
            struck_through=line.status in STRUCK_THROUGH,
        )


class LedgerResponse(BaseModel):
    id: str
    kind: LedgerKind
    lines: List[LineView]
    subtotal_cents: int
    tax_rate_percent: Decimal
    tax_cents: int
    discount_cents: int
    total_cents: int
    complimentary_cents: int
    complimentary_cost_cents: int
    notes: Optional[str] = None
    finalized: bool
    finalized_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_ledger(cls, ledger: Ledger) -> "LedgerResponse":
        return cls(
            id=ledger.id,
            kind=ledger.kind,
            lines=[LineView.from_line(line) for line in ledger.lines],
            subtotal_cents=ledger.subtotal_cents,
            tax_rate_percent=ledger.tax_rate_percent,
            tax_cents=ledger.tax_cents,
            discount_cents=ledger.discount_cents,
            total_cents=ledger.total_cents,
            complimentary_cents=ledger.complimentary_cents,
            complimentary_cost_cents=ledger.complimentary_cost_cents,
            notes=ledger.notes,
            finalized=ledger.finalized,
            finalized_at=ledger.finalized_at,
            version=ledger.version,
            created_at=ledger.created_at,
            updated_at=ledger.updated_at,
        )


class TransactionResponse(BaseModel):
    id: str
    source: TransactionSource
    ledger_id: str
    request_id: Optional[str] = None
    lines: List[LineView]
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    charges_cents: int
    total_cents: int
    payment_method: PaymentMethod
    customer_name: Optional[str] = None
    amount_received_cents: Optional[int] = None
    change_cents: Optional[int] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str
    timestamp: datetime

    @classmethod
    def from_transaction(cls, transaction: FinalizedTransaction) -> "TransactionResponse":
        data = transaction.model_dump(exclude={"lines"})
        return cls(**data, lines=[LineView.from_line(line) for line in transaction.lines])


class ReasonPresets(BaseModel):
    void: List[str]
    cancel: List[str]
    complimentary: List[str]
