"""
ObligationRepository - receivables and creditor balances in MongoDB.

Settlements are appended with a single ``find_one_and_update`` that also
checks and bumps ``version``, so two payments computed against the same
balance can never both land.
"""
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mistock.core.errors import ConcurrencyConflict, NotFoundError
from mistock.models.base import utcnow
from mistock.models.obligation import ObligationKind, SettlementObligation, SettlementRecord
from mistock.repositories.base import ObligationStore, json_timestamp, to_document


class ObligationRepository(ObligationStore):

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["obligations"]

    async def insert(self, obligation: SettlementObligation) -> SettlementObligation:
        await self.collection.insert_one(to_document(obligation))
        return obligation

    async def get(self, obligation_id: str) -> Optional[SettlementObligation]:
        doc = await self.collection.find_one({"_id": obligation_id})
        if doc:
            return SettlementObligation(**doc)
        return None

    async def append_settlement(
        self,
        obligation_id: str,
        record: SettlementRecord,
        expected_version: int
    ) -> SettlementObligation:
        result = await self.collection.find_one_and_update(
            {"_id": obligation_id, "version": expected_version},
            {
                "$push": {"settlements": to_document(record)},
                "$inc": {"version": 1},
                "$set": {"updated_at": json_timestamp(utcnow())}
            },
            return_document=True
        )

        if result:
            return SettlementObligation(**result)

        if await self.collection.count_documents({"_id": obligation_id}, limit=1) == 0:
            raise NotFoundError(f"Obligation {obligation_id} not found")
        raise ConcurrencyConflict(
            f"Obligation {obligation_id} changed since version {expected_version}"
        )

    async def list(self, kind: Optional[ObligationKind] = None) -> List[SettlementObligation]:
        query = {}
        if kind is not None:
            query["kind"] = kind.value
        docs = await self.collection.find(query).sort("created_at", 1).to_list(None)
        return [SettlementObligation(**doc) for doc in docs]
