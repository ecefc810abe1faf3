from typing import List, Optional
from datetime import date, datetime
from pydantic import Field, field_serializer

from app.models.base import MongoModel, _utcnow, date_to_str

MULTIPLE_COURSES = "Multiple Courses"
GENERAL_FEE = "General Fee"


class FeeReceipt(MongoModel):
    """Immutable record of one payment transaction."""
    receipt_number: str
    student_id: str
    fee_ids: List[str] = []  # Ledger entries touched by the payment
    student_name: str
    course_name: str
    amount_paid_cents: int
    payment_date: date
    payment_method: str
    description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    @field_serializer("payment_date")
    def _serialize_payment_date(self, value: date) -> Optional[str]:
        return date_to_str(value)
