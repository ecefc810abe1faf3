import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import FeeValidationError, NoBillableCoursesError, NotFoundError
from app.models.ledger import FeeStatus, FeeType, LedgerEntry
from app.repositories.course_repo import CourseRepository
from app.repositories.ledger_repo import LedgerRepository
from app.repositories.student_repo import StudentRepository
from app.schemas.fee import (
    AggregatedFeeView,
    FeeCreate,
    FeeFilter,
    FeeSummary,
    OverdueRefreshResponse,
)
from app.schemas.payment import PaymentCreate, StudentPaymentResponse
from app.services.fee_aggregator import aggregate
from app.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


def summarize_entries(entries: List[LedgerEntry]) -> FeeSummary:
    """Totals over raw entries: expected, collected (paid) and overdue."""
    return FeeSummary(
        total_expected_cents=sum(e.amount_cents for e in entries),
        collected_cents=sum(e.amount_cents for e in entries if e.status == FeeStatus.PAID),
        overdue_cents=sum(e.amount_cents for e in entries if e.status == FeeStatus.OVERDUE),
        record_count=len(entries),
    )


class FeeService:
    """
    Fee read models and mutations.

    Aggregated rows are never cached: every read fetches students, courses
    and entries again and runs the aggregator, so a read issued after a
    confirmed write always reflects it.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.students = StudentRepository(db)
        self.courses = CourseRepository(db)
        self.ledger = LedgerRepository(db)
        self.payments = PaymentService(db)

    async def load_fee_views(self, today: Optional[date] = None) -> List[AggregatedFeeView]:
        """Aggregated fee rows for all active students."""
        students = await self.students.list_active_students()
        courses = await self.courses.list_active_courses()
        entries = await self.ledger.list_entries(student_ids=[s.id for s in students])
        return aggregate(students, courses, entries, today)

    async def get_fee_view(self, student_id: str, today: Optional[date] = None) -> Optional[AggregatedFeeView]:
        """Aggregated row for one student; None when they have nothing billable."""
        student = await self.students.get_student(student_id)
        if student is None:
            raise NotFoundError(f"Student {student_id} not found")

        courses = await self.courses.list_active_courses()
        entries = await self.ledger.list_entries(student_ids=[student_id])
        views = aggregate([student], courses, entries, today)
        return views[0] if views else None

    async def pay_student(self, student_id: str, payment: PaymentCreate) -> StudentPaymentResponse:
        """Pay against a student's aggregated balance, then re-aggregate."""
        if payment.amount_cents is None or payment.amount_cents <= 0:
            raise FeeValidationError("Payment amount must be greater than zero")

        row = await self.get_fee_view(student_id)
        if row is None:
            raise NoBillableCoursesError(student_id)

        result = await self.payments.pay(row, payment)
        return StudentPaymentResponse(
            payment=result,
            fee_view=await self.get_fee_view(student_id),
        )

    async def list_fees(self, filters: FeeFilter) -> List[LedgerEntry]:
        """Fee records filtered by student, status and a name / fee type search."""
        statuses = [filters.status] if filters.status else None
        student_ids = [filters.student_id] if filters.student_id else None
        entries = await self.ledger.list_entries(student_ids=student_ids, statuses=statuses)

        if not filters.search:
            return entries

        term = filters.search.lower()
        matching_students = set(await self.students.find_ids_by_name(filters.search))
        return [
            e for e in entries
            if e.student_id in matching_students or term in FeeType(e.fee_type).value
        ]

    async def summarize(self) -> FeeSummary:
        return summarize_entries(await self.ledger.list_entries())

    async def create_fee(self, fee_in: FeeCreate) -> LedgerEntry:
        """Create a fee record, optionally applying an initial payment to it."""
        student = await self.students.get_student(fee_in.student_id)
        if student is None:
            raise NotFoundError(f"Student {fee_in.student_id} not found")
        if fee_in.course_id and await self.courses.get_course(fee_in.course_id) is None:
            raise NotFoundError(f"Course {fee_in.course_id} not found")

        entry = await self.ledger.insert_entry(LedgerEntry(
            student_id=fee_in.student_id,
            course_id=fee_in.course_id,
            amount_cents=fee_in.amount_cents,
            paid_amount_cents=0,
            due_date=fee_in.due_date,
            status=FeeStatus.PENDING,
            fee_type=fee_in.fee_type,
            description=fee_in.description,
        ))
        logger.info("Created fee record %s for student %s", entry.id, entry.student_id)

        if fee_in.initial_payment_cents > 0:
            result = await self.payments.pay_entry(entry.id, PaymentCreate(
                amount_cents=fee_in.initial_payment_cents,
                payment_method=fee_in.payment_method,
                payment_date=fee_in.payment_date,
                description=fee_in.description,
            ))
            return result.updated_entries[0]

        return entry

    async def refresh_overdue(self, today: Optional[date] = None) -> OverdueRefreshResponse:
        """Move unpaid fees past their due date to overdue (default: today in UTC)."""
        if today is None:
            today = datetime.now(timezone.utc).date()
        updated = await self.ledger.mark_overdue(today)
        logger.info("Marked %d fee records overdue as of %s", updated, today)
        return OverdueRefreshResponse(as_of=today, updated=updated)
