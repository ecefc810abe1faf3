from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.communication import Communication
from app.repositories.base import store_errors


class CommunicationRepository:
    """Append-only log of outbound messages."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["communications"]

    async def log(self, communication: Communication) -> Communication:
        with store_errors("log communication"):
            result = await self.collection.insert_one(communication.to_document())
        return communication.model_copy(update={"id": str(result.inserted_id)})
