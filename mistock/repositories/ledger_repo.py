"""
LedgerRepository - ledgers persisted in MongoDB.

Whole-document writes guarded by the ``version`` field: a replace only
matches when the stored version is still the one the change was computed
from.
"""
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mistock.core.errors import ConcurrencyConflict, NotFoundError
from mistock.models.base import utcnow
from mistock.models.ledger import Ledger, LedgerKind
from mistock.repositories.base import LedgerStore, to_document


class LedgerRepository(LedgerStore):
    """Repository for sale, posting and requisition ledgers."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["ledgers"]

    async def insert(self, ledger: Ledger) -> Ledger:
        await self.collection.insert_one(to_document(ledger))
        return ledger

    async def get(self, ledger_id: str) -> Optional[Ledger]:
        doc = await self.collection.find_one({"_id": ledger_id})
        if doc:
            return Ledger(**doc)
        return None

    async def replace(self, ledger: Ledger, expected_version: int) -> Ledger:
        stored = ledger.model_copy(update={"version": expected_version + 1, "updated_at": utcnow()})
        result = await self.collection.replace_one(
            {"_id": ledger.id, "version": expected_version},
            to_document(stored)
        )
        if result.matched_count == 0:
            if await self.collection.count_documents({"_id": ledger.id}, limit=1) == 0:
                raise NotFoundError(f"Ledger {ledger.id} not found")
            raise ConcurrencyConflict(
                f"Ledger {ledger.id} changed since version {expected_version}"
            )
        return stored

    async def list(self, kind: Optional[LedgerKind] = None) -> List[Ledger]:
        query = {}
        if kind is not None:
            query["kind"] = kind.value
        docs = await self.collection.find(query).sort("created_at", 1).to_list(None)
        return [Ledger(**doc) for doc in docs]
