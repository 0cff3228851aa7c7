from typing import List, Optional

from fastapi import APIRouter, Depends, status

from mistock.api.deps import get_services
from mistock.core.auth import get_current_actor
from mistock.models.obligation import ObligationKind, ObligationStatus
from mistock.models.user import Actor
from mistock.schemas.settlement import (
    ObligationCreate,
    SettlementCreate,
    SettlementObligationSnapshot,
    SettlementRecordResponse,
    SettlementResultResponse,
)
from mistock.services.container import Services

router = APIRouter()


@router.post("/", response_model=SettlementObligationSnapshot, status_code=status.HTTP_201_CREATED)
async def open_obligation(
    body: ObligationCreate,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    obligation = await services.settlements.open_obligation(
        body.kind,
        body.counterparty_name,
        body.original_amount_cents,
        cashier_name=body.cashier_name or actor.display_name,
        description=body.description
    )
    return SettlementObligationSnapshot.from_obligation(obligation)


@router.get("/", response_model=List[SettlementObligationSnapshot])
async def list_obligations(
    kind: Optional[ObligationKind] = None,
    search: Optional[str] = None,
    status: Optional[ObligationStatus] = None,
    services: Services = Depends(get_services)
):
    """Search matches counterparty or cashier name, case-insensitive"""
    obligations = await services.reports.list_obligations(kind, search, status)
    return [SettlementObligationSnapshot.from_obligation(o) for o in obligations]


@router.get("/{obligation_id}", response_model=SettlementObligationSnapshot)
async def get_obligation(obligation_id: str, services: Services = Depends(get_services)):
    return SettlementObligationSnapshot.from_obligation(
        await services.settlements.get_obligation(obligation_id)
    )


@router.post("/{obligation_id}/settlements", response_model=SettlementResultResponse)
async def record_settlement(
    obligation_id: str,
    body: SettlementCreate,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    result = await services.settlements.record_settlement(
        obligation_id,
        body.amount_cents,
        body.method,
        recorded_by=actor.display_name,
        reference=body.reference,
        notes=body.notes
    )
    return SettlementResultResponse(
        obligation=SettlementObligationSnapshot.from_obligation(result.obligation),
        record=SettlementRecordResponse.from_record(result.record),
        excess_cents=result.excess_cents
    )


@router.get("/{obligation_id}/settlements", response_model=List[SettlementRecordResponse])
async def get_history(obligation_id: str, services: Services = Depends(get_services)):
    """Settlement records in the order they were recorded"""
    history = await services.settlements.get_history(obligation_id)
    return [SettlementRecordResponse.from_record(record) for record in history]
