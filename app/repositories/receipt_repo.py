import re
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.receipt import FeeReceipt
from app.repositories.base import store_errors
from app.schemas.receipt import ReceiptFilter


class ReceiptRepository:
    """Fee receipt storage. Receipts are written once and never updated."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["fee_receipts"]

    async def insert_receipt(self, receipt: FeeReceipt) -> FeeReceipt:
        with store_errors("create receipt"):
            result = await self.collection.insert_one(receipt.to_document())
        return receipt.model_copy(update={"id": str(result.inserted_id)})

    async def list_receipts(self, filters: ReceiptFilter) -> List[FeeReceipt]:
        """Receipts paid inside the window, newest first."""
        query: dict = {
            "payment_date": {
                "$gte": filters.start_date.isoformat(),
                "$lte": filters.end_date.isoformat()
            }
        }
        if filters.search:
            pattern = {"$regex": re.escape(filters.search), "$options": "i"}
            query["$or"] = [
                {"student_name": pattern},
                {"course_name": pattern},
                {"receipt_number": pattern}
            ]

        with store_errors("load receipts"):
            docs = await self.collection.find(query).sort("created_at", -1).to_list(None)
        return [FeeReceipt(**doc) for doc in docs]

    async def get_by_number(self, receipt_number: str) -> Optional[FeeReceipt]:
        with store_errors("load receipt"):
            doc = await self.collection.find_one({"receipt_number": receipt_number})
        return FeeReceipt(**doc) if doc else None
