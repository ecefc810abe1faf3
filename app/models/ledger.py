"""
Ledger model - one billable obligation (fee record) for a student.

Design principles:
- Owned by exactly one student
- Never deleted; payments only move paid_amount_cents, status and paid_date
- Status: pending → partial → paid (overdue is set by the overdue sweep)
- All amounts in integer cents
"""

from enum import Enum
from typing import Any, Optional
from datetime import date, datetime
from pydantic import Field, field_serializer, field_validator

from app.models.base import MongoModel, _utcnow, date_to_str


class FeeStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class FeeType(str, Enum):
    TUITION = "tuition"
    REGISTRATION = "registration"
    EXAM = "exam"
    LIBRARY = "library"
    LAB = "lab"
    TRANSPORT = "transport"
    OTHER = "other"


# Entries the payment distributor may allocate to
PAYABLE_STATUSES = (FeeStatus.PENDING, FeeStatus.PARTIAL)


class LedgerEntry(MongoModel):
    """
    Amount owed by a student for one fee.

    Target invariant: 0 <= paid_amount_cents <= amount_cents. The direct-pay
    path does not enforce the upper bound.
    """
    student_id: str
    course_id: Optional[str] = None

    amount_cents: int = 0
    paid_amount_cents: int = 0

    due_date: date
    paid_date: Optional[date] = None
    status: FeeStatus = FeeStatus.PENDING
    fee_type: FeeType = FeeType.TUITION
    description: str = ""
    payment_method: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("amount_cents", "paid_amount_cents", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _missing_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_serializer("due_date", "paid_date")
    def _serialize_dates(self, value: Optional[date]) -> Optional[str]:
        return date_to_str(value)

    def open_amount_cents(self) -> int:
        """How much remains unpaid."""
        return self.amount_cents - self.paid_amount_cents

    def is_fully_paid(self) -> bool:
        return self.paid_amount_cents >= self.amount_cents
