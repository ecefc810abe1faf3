import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    await mongodb.db["students"].create_index("status")
    await mongodb.db["courses"].create_index("status")
    await mongodb.db["student_courses"].create_index([("student_id", 1), ("status", 1)])

    # Ledger (fee) indexes
    await mongodb.db["fees"].create_index([("student_id", 1), ("status", 1), ("due_date", 1)])
    await mongodb.db["fees"].create_index("due_date")

    # Receipt indexes
    await mongodb.db["fee_receipts"].create_index("receipt_number", unique=True)
    await mongodb.db["fee_receipts"].create_index("payment_date")

    await mongodb.db["communications"].create_index("student_id")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
