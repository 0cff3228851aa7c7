from typing import List, Optional

from fastapi import APIRouter, Depends, status

from mistock.api.deps import get_services
from mistock.core.auth import get_current_actor
from mistock.models.purchase_request import RequestStatus
from mistock.models.user import Actor
from mistock.schemas.ledger import TransactionResponse
from mistock.schemas.purchase_request import (
    ChargesUpdate,
    PaymentComplete,
    PurchaseRequestResponse,
    RequestSubmit,
)
from mistock.services.container import Services

router = APIRouter()


@router.post("/", response_model=PurchaseRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    body: RequestSubmit,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    """Snapshot a ledger into a pending purchase request"""
    request = await services.purchase_requests.submit(body.ledger_id, actor, body.customer_name)
    return PurchaseRequestResponse.from_request(request)


@router.get("/", response_model=List[PurchaseRequestResponse])
async def list_requests(
    status: Optional[RequestStatus] = None,
    services: Services = Depends(get_services)
):
    """Newest first"""
    requests = await services.purchase_requests.list_requests(status)
    return [PurchaseRequestResponse.from_request(r) for r in requests]


@router.get("/{request_id}", response_model=PurchaseRequestResponse)
async def get_request(request_id: str, services: Services = Depends(get_services)):
    return PurchaseRequestResponse.from_request(
        await services.purchase_requests.get_request(request_id)
    )


@router.put("/{request_id}/charges", response_model=PurchaseRequestResponse)
async def set_charges(
    request_id: str,
    body: ChargesUpdate,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    request = await services.purchase_requests.set_charges(request_id, body.amount_cents, actor)
    return PurchaseRequestResponse.from_request(request)


@router.post("/{request_id}/unlock", response_model=PurchaseRequestResponse)
async def unlock_request(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    request = await services.purchase_requests.unlock(request_id, actor)
    return PurchaseRequestResponse.from_request(request)


@router.post("/{request_id}/pay", response_model=TransactionResponse)
async def complete_payment(
    request_id: str,
    body: PaymentComplete,
    actor: Actor = Depends(get_current_actor),
    services: Services = Depends(get_services)
):
    transaction = await services.purchase_requests.complete_payment(
        request_id, body.payment_method, actor, reference=body.reference, notes=body.notes
    )
    return TransactionResponse.from_transaction(transaction)
