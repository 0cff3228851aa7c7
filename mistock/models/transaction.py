"""
Finalized transaction - the record emitted when a sale or purchase request is paid.

Consumed by receipt/report collaborators and by the settlement ledger
(credit payments open a receivable).
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mistock.models.base import ObjectIdStr, new_id, utcnow
from mistock.models.line_item import LineItem
from mistock.models.purchase_request import PaymentMethod


class TransactionSource(str, Enum):
    DIRECT_SALE = "direct_sale"
    PURCHASE_REQUEST = "purchase_request"


class FinalizedTransaction(BaseModel):
    id: ObjectIdStr = Field(default_factory=new_id, alias="_id")
    source: TransactionSource
    ledger_id: str
    request_id: Optional[str] = None
    lines: List[LineItem]
    subtotal_cents: int
    discount_cents: int = 0
    tax_cents: int = 0
    charges_cents: int = 0
    total_cents: int
    payment_method: PaymentMethod
    customer_name: Optional[str] = None
    amount_received_cents: Optional[int] = None
    change_cents: Optional[int] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str
    timestamp: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True, frozen=True)
