"""
Settlement schemas.

SettlementObligationSnapshot is the outbound shape of an obligation: source
data plus the derived balance and status at the moment it was read.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from mistock.models.obligation import (
    ObligationKind,
    ObligationStatus,
    SettlementMethod,
    SettlementObligation,
    SettlementRecord,
)


class ObligationCreate(BaseModel):
    kind: ObligationKind
    counterparty_name: str
    original_amount_cents: int
    cashier_name: Optional[str] = None
    description: str = ""


class SettlementCreate(BaseModel):
    amount_cents: int
    method: SettlementMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class SettlementRecordResponse(BaseModel):
    id: str
    amount_cents: int
    recorded_at: datetime
    method: SettlementMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str

    @classmethod
    def from_record(cls, record: SettlementRecord) -> "SettlementRecordResponse":
        return cls(**record.model_dump())


class SettlementObligationSnapshot(BaseModel):
    id: str
    kind: ObligationKind
    counterparty_name: str
    cashier_name: Optional[str] = None
    description: str = ""
    original_amount_cents: int
    remaining_balance_cents: int
    total_paid_cents: int
    status: ObligationStatus
    status_label: str
    settlements: List[SettlementRecordResponse]
    source_transaction_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_obligation(cls, obligation: SettlementObligation) -> "SettlementObligationSnapshot":
        return cls(
            id=obligation.id,
            kind=obligation.kind,
            counterparty_name=obligation.counterparty_name,
            cashier_name=obligation.cashier_name,
            description=obligation.description,
            original_amount_cents=obligation.original_amount_cents,
            remaining_balance_cents=obligation.remaining_balance_cents,
            total_paid_cents=obligation.total_paid_cents,
            status=obligation.status,
            status_label=obligation.status_label,
            settlements=[SettlementRecordResponse.from_record(s) for s in obligation.history()],
            source_transaction_id=obligation.source_transaction_id,
            created_at=obligation.created_at,
        )


class SettlementResultResponse(BaseModel):
    obligation: SettlementObligationSnapshot
    record: SettlementRecordResponse
    excess_cents: int = 0
