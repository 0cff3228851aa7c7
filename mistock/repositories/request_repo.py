from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mistock.core.errors import ConcurrencyConflict, NotFoundError
from mistock.models.base import utcnow
from mistock.models.purchase_request import PurchaseRequest, RequestStatus
from mistock.repositories.base import RequestStore, to_document


class PurchaseRequestRepository(RequestStore):
    """Purchase requests with their frozen ledger snapshots."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["purchase_requests"]

    async def insert(self, request: PurchaseRequest) -> PurchaseRequest:
        await self.collection.insert_one(to_document(request))
        return request

    async def get(self, request_id: str) -> Optional[PurchaseRequest]:
        doc = await self.collection.find_one({"_id": request_id})
        if doc:
            return PurchaseRequest(**doc)
        return None

    async def replace(self, request: PurchaseRequest, expected_version: int) -> PurchaseRequest:
        stored = request.model_copy(update={"version": expected_version + 1, "updated_at": utcnow()})
        result = await self.collection.replace_one(
            {"_id": request.id, "version": expected_version},
            to_document(stored)
        )
        if result.matched_count == 0:
            if await self.collection.count_documents({"_id": request.id}, limit=1) == 0:
                raise NotFoundError(f"Purchase request {request.id} not found")
            raise ConcurrencyConflict(
                f"Purchase request {request.id} changed since version {expected_version}"
            )
        return stored

    async def list(self, status: Optional[RequestStatus] = None) -> List[PurchaseRequest]:
        query = {}
        if status is not None:
            query["status"] = status.value
        docs = await self.collection.find(query).sort("created_at", -1).to_list(None)
        return [PurchaseRequest(**doc) for doc in docs]
