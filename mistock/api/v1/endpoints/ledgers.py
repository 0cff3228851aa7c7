from typing import List, Optional

from fastapi import APIRouter, Depends, status

from mistock.api.deps import get_services
from mistock.core.auth import get_current_actor
from mistock.models.ledger import LedgerKind
from mistock.models.line_item import CANCEL_REASONS, COMPLIMENTARY_REASONS, VOID_REASONS
from mistock.models.user import Actor
from mistock.schemas.ledger import (
    LedgerCreate,
    LedgerDiscount,
    LedgerResponse,
    LineAdd,
    LineDiscount,
    LineReason,
    QuantityUpdate,
    ReasonPresets,
    SaleComplete,
    TransactionResponse,
)
from mistock.services.container import Services

router = APIRouter()


@router.get("/reasons", response_model=ReasonPresets)
async def get_reason_presets():
    """Preset reasons offered for void, cancel and complimentary"""
    return ReasonPresets(
        void=list(VOID_REASONS),
        cancel=list(CANCEL_REASONS),
        complimentary=list(COMPLIMENTARY_REASONS)
    )


@router.post("/", response_model=LedgerResponse, status_code=status.HTTP_201_CREATED)
async def open_ledger(body: LedgerCreate, services: Services = Depends(get_services)):
    ledger = await services.ledger.open_ledger(body.kind, body.tax_rate_percent, body.notes)
    return LedgerResponse.from_ledger(ledger)


@router.get("/", response_model=List[LedgerResponse])
async def list_ledgers(kind: Optional[LedgerKind] = None, services: Services = Depends(get_services)):
    return [LedgerResponse.from_ledger(ledger) for ledger in await services.ledger.list_ledgers(kind)]


@router.get("/{ledger_id}", response_model=LedgerResponse)
async def get_ledger(ledger_id: str, services: Services = Depends(get_services)):
    return LedgerResponse.from_ledger(await services.ledger.get_ledger(ledger_id))


@router.post("/{ledger_id}/lines", response_model=LedgerResponse)
async def add_line(ledger_id: str, body: LineAdd, services: Services = Depends(get_services)):
    """Add an item; merges into the active line for the same SKU"""
    ledger = await services.ledger.add_line(ledger_id, body.item, body.quantity)
    return LedgerResponse.from_ledger(ledger)


@router.patch("/{ledger_id}/lines/{line_id}", response_model=LedgerResponse)
async def set_quantity(
    ledger_id: str,
    line_id: str,
    body: QuantityUpdate,
    services: Services = Depends(get_services)
):
    """Change a line's quantity; zero or less removes the line"""
    ledger = await services.ledger.set_quantity(ledger_id, line_id, body.quantity)
    return LedgerResponse.from_ledger(ledger)


@router.delete("/{ledger_id}/lines/{line_id}", response_model=LedgerResponse)
async def remove_line(ledger_id: str, line_id: str, services: Services = Depends(get_services)):
    return LedgerResponse.from_ledger(await services.ledger.remove_line(ledger_id, line_id))


@router.post("/{ledger_id}/lines/{line_id}/void", response_model=LedgerResponse)
async def void_line(
    ledger_id: str,
    line_id: str,
    body: LineReason,
    services: Services = Depends(get_services)
):
    ledger = await services.ledger.void_line(ledger_id, line_id, body.reason)
    return LedgerResponse.from_ledger(ledger)


@router.post("/{ledger_id}/lines/{line_id}/cancel", response_model=LedgerResponse)
async def cancel_line(
    ledger_id: str,
    line_id: str,
    body: LineReason,
    services: Services = Depends(get_services)
):
    ledger = await services.ledger.cancel_line(ledger_id, line_id, body.reason)
    return LedgerResponse.from_ledger(ledger)


@router.post("/{ledger_id}/lines/{line_id}/complimentary", response_model=LedgerResponse)
async def mark_complimentary(
    ledger_id: str,
    line_id: str,
    body: LineReason,
    services: Services = Depends(get_services)
):
    ledger = await services.ledger.mark_complimentary(ledger_id, line_id, body.reason)
    return LedgerResponse.from_ledger(ledger)


@router.post("/{ledger_id}/lines/{line_id}/discount", response_model=LedgerResponse)
async def apply_discount(
    ledger_id: str,
    line_id: str,
    body: LineDiscount,
    services: Services = Depends(get_services)
):
    ledger = await services.ledger.apply_discount(ledger_id, line_id, body.percent)
    return LedgerResponse.from_ledger(ledger)


@router.put("/{ledger_id}/discount", response_model=LedgerResponse)
async def set_discount(ledger_id: str, body: LedgerDiscount, services: Services = Depends(get_services)):
    """Ledger-level discount in cents"""
    ledger = await services.ledger.set_discount(ledger_id, body.amount_cents)
    return LedgerResponse.from_ledger(ledger)


@router.post("/{ledger_id}/finalize", response_model=LedgerResponse)
async def finalize_ledger(ledger_id: str, services: Services = Depends(get_services)):
    return LedgerResponse.from_ledger(await services.ledger.finalize(ledger_id))


@router.post("/{ledger_id}/complete", response_model=TransactionResponse)
async def complete_sale(
    ledger_id: str,
    body: SaleComplete,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    """POS checkout. Credit sales open a receivable for the total."""
    transaction = await services.ledger.complete_sale(
        ledger_id,
        body.payment_method,
        actor,
        customer_name=body.customer_name,
        amount_received_cents=body.amount_received_cents,
        reference=body.reference,
        notes=body.notes
    )
    return TransactionResponse.from_transaction(transaction)
