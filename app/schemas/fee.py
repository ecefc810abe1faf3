from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from app.models.ledger import FeeStatus, FeeType, LedgerEntry


class CourseRef(BaseModel):
    id: str
    name: str
    price_cents: int


class AggregatedFeeView(BaseModel):
    """
    Per-student rollup of ledger entries, recomputed on every load.

    When the student has no entries yet, totals come from course prices
    and `expected_only` is set.
    """
    student_id: str
    student_name: str
    courses: List[CourseRef] = []
    total_amount_cents: int
    total_paid_cents: int
    remaining_cents: int
    status: FeeStatus
    earliest_due_date: date
    latest_paid_date: Optional[date] = None
    expected_only: bool = False
    entries: List[LedgerEntry] = []

    model_config = {"use_enum_values": True}


class FeeCreate(BaseModel):
    student_id: str
    amount_cents: int = Field(..., ge=0)
    due_date: date
    fee_type: FeeType = FeeType.TUITION
    description: str = ""
    course_id: Optional[str] = None
    initial_payment_cents: int = Field(default=0, ge=0)
    payment_method: Optional[str] = None
    payment_date: Optional[date] = None


class FeeFilter(BaseModel):
    student_id: Optional[str] = None
    status: Optional[FeeStatus] = None
    search: Optional[str] = None


class FeeSummary(BaseModel):
    """Totals shown above the fee table."""
    total_expected_cents: int = 0
    collected_cents: int = 0
    overdue_cents: int = 0
    record_count: int = 0


class OverdueRefreshResponse(BaseModel):
    as_of: date
    updated: int
