from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mistock.models.transaction import FinalizedTransaction
from mistock.repositories.base import TransactionStore


class TransactionRepository(TransactionStore):
    """Finalized transactions. Insert-only."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["transactions"]

    async def insert(self, transaction: FinalizedTransaction) -> FinalizedTransaction:
        await self.collection.insert_one(transaction.model_dump(mode="json", by_alias=True))
        return transaction

    async def get(self, transaction_id: str) -> Optional[FinalizedTransaction]:
        doc = await self.collection.find_one({"_id": transaction_id})
        if doc:
            return FinalizedTransaction(**doc)
        return None

    async def list(self) -> List[FinalizedTransaction]:
        docs = await self.collection.find({}).sort("timestamp", 1).to_list(None)
        return [FinalizedTransaction(**doc) for doc in docs]
