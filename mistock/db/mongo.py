import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from mistock.core.config import Settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager, one per application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: AsyncIOMotorClient = None
        self.db: AsyncIOMotorDatabase = None

    async def connect(self) -> AsyncIOMotorDatabase:
        self.client = AsyncIOMotorClient(self.settings.MONGODB_URL)
        self.db = self.client[self.settings.DATABASE_NAME]

        await create_indexes(self.db)
        logger.info("Connected to MongoDB: %s", self.settings.DATABASE_NAME)
        return self.db

    async def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create database indexes."""
    # Ledger indexes
    await db["ledgers"].create_index([("kind", 1), ("created_at", 1)])

    # Purchase request indexes
    await db["purchase_requests"].create_index([("status", 1), ("created_at", -1)])

    # Obligation indexes
    await db["obligations"].create_index([("kind", 1), ("created_at", 1)])
    await db["obligations"].create_index("counterparty_name")

    # Transaction indexes
    await db["transactions"].create_index("timestamp")
    await db["transactions"].create_index("ledger_id")
