from typing import List, Optional

from fastapi import APIRouter, Depends

from mistock.api.deps import get_services
from mistock.models.obligation import ObligationKind
from mistock.schemas.report import LineAuditEntry, ObligationSummary, SalesSummary
from mistock.services.container import Services

router = APIRouter()


@router.get("/obligations/summary", response_model=ObligationSummary)
async def obligation_summary(
    kind: Optional[ObligationKind] = None,
    services: Services = Depends(get_services)
):
    return await services.reports.obligation_summary(kind)


@router.get("/sales/summary", response_model=SalesSummary)
async def sales_summary(services: Services = Depends(get_services)):
    return await services.reports.sales_summary()


@router.get("/items/voided", response_model=List[LineAuditEntry])
async def voided_items(services: Services = Depends(get_services)):
    return await services.reports.voided_items()


@router.get("/items/cancelled", response_model=List[LineAuditEntry])
async def cancelled_items(services: Services = Depends(get_services)):
    return await services.reports.cancelled_items()


@router.get("/items/discounted", response_model=List[LineAuditEntry])
async def discounted_items(services: Services = Depends(get_services)):
    return await services.reports.discounted_items()


@router.get("/items/complimentary", response_model=List[LineAuditEntry])
async def complimentary_items(services: Services = Depends(get_services)):
    return await services.reports.complimentary_items()
