from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel

from mistock.models.line_item import LineStatus


class ObligationSummary(BaseModel):
    """Totals over a set of obligations, counts keyed by status value."""
    count: int = 0
    counts_by_status: Dict[str, int] = {}
    original_cents: int = 0
    paid_cents: int = 0
    outstanding_cents: int = 0
    outstanding_display: str = ""


class SalesSummary(BaseModel):
    transaction_count: int = 0
    gross_cents: int = 0
    discount_cents: int = 0
    tax_cents: int = 0
    charges_cents: int = 0
    total_cents: int = 0
    totals_by_method: Dict[str, int] = {}
    total_display: str = ""


class LineAuditEntry(BaseModel):
    """One voided / discounted / complimentary line, with where it came from."""
    ledger_id: str
    line_id: str
    sku: str
    name: str
    status: LineStatus
    quantity: int
    unit_price_cents: int
    value_cents: int
    reason: Optional[str] = None
    discount_percent: Optional[Decimal] = None
    discount_amount_cents: int = 0
    cost_cents: Optional[int] = None
