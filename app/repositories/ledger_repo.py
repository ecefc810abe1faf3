"""
LedgerRepository - Manages fee records (the `fees` collection).

Calendar dates are stored as ISO strings, so range filters and sorts on
due_date compare strings.
"""

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.base import date_to_str, to_object_id
from app.models.ledger import FeeStatus, LedgerEntry, PAYABLE_STATUSES
from app.repositories.base import store_errors


def _values(statuses: Iterable[FeeStatus]) -> List[str]:
    return [FeeStatus(s).value for s in statuses]


class LedgerRepository:
    """Repository for ledger entries (fee records)."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["fees"]

    async def list_entries(
        self,
        student_ids: Optional[List[str]] = None,
        statuses: Optional[Iterable[FeeStatus]] = None,
    ) -> List[LedgerEntry]:
        """Entries matching the filters, latest due date first."""
        query: dict = {}
        if student_ids is not None:
            query["student_id"] = {"$in": student_ids}
        if statuses is not None:
            query["status"] = {"$in": _values(statuses)}

        with store_errors("load fee records"):
            docs = await self.collection.find(query).sort("due_date", -1).to_list(None)
        return [LedgerEntry(**doc) for doc in docs]

    async def list_outstanding(self, student_id: str) -> List[LedgerEntry]:
        """Payable entries for a student, earliest due date first."""
        with store_errors("load outstanding fees"):
            docs = await self.collection.find({
                "student_id": student_id,
                "status": {"$in": _values(PAYABLE_STATUSES)}
            }).sort([("due_date", 1), ("created_at", 1)]).to_list(None)
        return [LedgerEntry(**doc) for doc in docs]

    async def get_entry(self, fee_id: str) -> Optional[LedgerEntry]:
        oid = to_object_id(fee_id)
        if oid is None:
            return None

        with store_errors("load fee record"):
            doc = await self.collection.find_one({"_id": oid})
        return LedgerEntry(**doc) if doc else None

    async def insert_entry(self, entry: LedgerEntry) -> LedgerEntry:
        with store_errors("create fee record"):
            result = await self.collection.insert_one(entry.to_document())
        return entry.model_copy(update={"id": str(result.inserted_id)})

    async def insert_entries(self, entries: List[LedgerEntry]) -> List[LedgerEntry]:
        if not entries:
            return []

        with store_errors("create fee records"):
            result = await self.collection.insert_many([e.to_document() for e in entries])
        return [
            entry.model_copy(update={"id": str(inserted_id)})
            for entry, inserted_id in zip(entries, result.inserted_ids)
        ]

    async def save_payment(self, entry: LedgerEntry) -> LedgerEntry:
        """Persist the payment fields of an entry mutated by a payment."""
        now = datetime.now(timezone.utc)
        with store_errors("update fee record"):
            await self.collection.update_one(
                {"_id": to_object_id(entry.id)},
                {
                    "$set": {
                        "paid_amount_cents": entry.paid_amount_cents,
                        "status": FeeStatus(entry.status).value,
                        "paid_date": date_to_str(entry.paid_date),
                        "payment_method": entry.payment_method,
                        "updated_at": now
                    }
                }
            )
        return entry.model_copy(update={"updated_at": now})

    async def mark_overdue(self, today: date) -> int:
        """Move payable entries due before `today` to overdue."""
        with store_errors("mark overdue fees"):
            result = await self.collection.update_many(
                {
                    "status": {"$in": _values(PAYABLE_STATUSES)},
                    "due_date": {"$lt": today.isoformat()}
                },
                {
                    "$set": {
                        "status": FeeStatus.OVERDUE.value,
                        "updated_at": datetime.now(timezone.utc)
                    }
                }
            )
        return result.modified_count
