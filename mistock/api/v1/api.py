from fastapi import APIRouter, Depends

from mistock.api.v1.endpoints import auth, ledgers, obligations, purchase_requests, reports
from mistock.core.auth import get_current_actor

api_router = APIRouter(dependencies=[Depends(get_current_actor)])

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(ledgers.router, prefix="/ledgers", tags=["ledgers"])
api_router.include_router(purchase_requests.router, prefix="/purchase-requests", tags=["purchase requests"])
api_router.include_router(obligations.router, prefix="/obligations", tags=["obligations"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
