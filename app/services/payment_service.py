"""
Payment distribution across a student's outstanding fee records.

A payment against a student's aggregated balance is spread over the payable
entries, earliest due date first. Each entry takes min(remaining payment,
open amount); the walk stops as soon as the payment is used up. When the
student has courses but no fee records at all, one tuition entry per course
is created first. A student who has records but none pending or partial
(all paid or overdue) cannot pay this way. Exactly one receipt is written
per payment.

A payment larger than everything outstanding leaves a surplus. Under the
default `discard` policy the surplus is not applied anywhere and the receipt
still shows the full requested amount; `unapplied_cents` on the result
reports it. The `reject` policy refuses such a payment before any write.

Writes are sequential with no transaction: a failure part way through leaves
the earlier writes in place.
"""

import itertools
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.exceptions import FeeValidationError, NoBillableCoursesError, NotFoundError
from app.models.ledger import FeeStatus, FeeType, LedgerEntry
from app.models.receipt import FeeReceipt, GENERAL_FEE, MULTIPLE_COURSES
from app.repositories.course_repo import CourseRepository
from app.repositories.ledger_repo import LedgerRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.repositories.student_repo import StudentRepository
from app.schemas.fee import AggregatedFeeView, CourseRef
from app.schemas.payment import Allocation, PaymentCreate, PaymentResult

logger = logging.getLogger(__name__)

OVERPAYMENT_DISCARD = "discard"
OVERPAYMENT_REJECT = "reject"

_receipt_sequence = itertools.count(1)


def generate_receipt_number(now: Optional[datetime] = None) -> str:
    """Time-derived receipt number, unique within this process."""
    if now is None:
        now = datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{settings.RECEIPT_NUMBER_PREFIX}-{millis}-{next(_receipt_sequence)}"


def synthesize_entries(row: AggregatedFeeView, today: date) -> List[LedgerEntry]:
    """One unpaid tuition entry per course, due today."""
    return [
        LedgerEntry(
            student_id=row.student_id,
            course_id=course.id,
            amount_cents=course.price_cents,
            paid_amount_cents=0,
            status=FeeStatus.PENDING,
            due_date=today,
            fee_type=FeeType.TUITION,
            description=f"Course fee for {course.name}",
        )
        for course in row.courses
    ]


def allocate_payment(
    entries: List[LedgerEntry],
    amount_cents: int,
    paid_on: date,
    payment_method: Optional[str] = None,
) -> Tuple[List[LedgerEntry], List[Allocation], int]:
    """
    Spread `amount_cents` over `entries` in the order given.

    Returns (updated copies of the entries touched, per-entry allocations,
    amount left over). Input entries are not modified.
    """
    remaining = amount_cents
    updated: List[LedgerEntry] = []
    allocations: List[Allocation] = []

    for entry in entries:
        if remaining <= 0:
            break

        allocation = max(0, min(remaining, entry.open_amount_cents()))
        new_paid = entry.paid_amount_cents + allocation
        fully_paid = new_paid >= entry.amount_cents

        changes = {
            "paid_amount_cents": new_paid,
            "status": FeeStatus.PAID if fully_paid else FeeStatus.PARTIAL,
        }
        if fully_paid and entry.status != FeeStatus.PAID:
            changes["paid_date"] = paid_on
        if payment_method:
            changes["payment_method"] = payment_method

        updated.append(entry.model_copy(update=changes))
        allocations.append(Allocation(fee_id=entry.id, allocated_cents=allocation))
        remaining -= allocation

    return updated, allocations, max(0, remaining)


def apply_direct_payment(
    entry: LedgerEntry,
    amount_cents: int,
    paid_on: date,
    payment_method: Optional[str] = None,
) -> LedgerEntry:
    """Single-entry payment. No cap: overpaying raises paid above amount."""
    new_paid = entry.paid_amount_cents + amount_cents
    fully_paid = new_paid >= entry.amount_cents

    changes = {
        "paid_amount_cents": new_paid,
        "status": FeeStatus.PAID if fully_paid else FeeStatus.PARTIAL,
    }
    if fully_paid and entry.status != FeeStatus.PAID:
        changes["paid_date"] = paid_on
    if payment_method:
        changes["payment_method"] = payment_method

    return entry.model_copy(update=changes)


def receipt_course_name(entries: List[LedgerEntry], courses: List[CourseRef]) -> str:
    if len(entries) > 1:
        return MULTIPLE_COURSES

    names = {course.id: course.name for course in courses}
    if entries and entries[0].course_id:
        return names.get(entries[0].course_id, GENERAL_FEE)
    if len(courses) == 1:
        return courses[0].name
    return GENERAL_FEE


def _validate_amount(amount_cents: int) -> None:
    if amount_cents is None or amount_cents <= 0:
        raise FeeValidationError("Payment amount must be greater than zero")


class PaymentService:
    """Applies payments to fee records and issues receipts."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.ledger = LedgerRepository(db)
        self.receipts = ReceiptRepository(db)
        self.students = StudentRepository(db)
        self.courses = CourseRepository(db)

    async def pay(
        self,
        row: AggregatedFeeView,
        payment: PaymentCreate,
        now: Optional[datetime] = None,
    ) -> PaymentResult:
        """Distribute a payment over a student's aggregated balance."""
        _validate_amount(payment.amount_cents)
        if not row.student_id:
            raise FeeValidationError("Payment requires a student")

        if now is None:
            now = datetime.now(timezone.utc)
        paid_on = payment.payment_date or now.date()
        method = payment.payment_method or settings.DEFAULT_PAYMENT_METHOD

        entries = await self.ledger.list_outstanding(row.student_id)
        pending_new: List[LedgerEntry] = []
        if not entries:
            if not row.expected_only:
                # Billed already; overdue records are paid one at a time via pay_entry
                raise NoBillableCoursesError(
                    row.student_id,
                    "No pending or partially paid fees for this student; "
                    "pay overdue fees individually",
                )
            if not row.courses:
                raise NoBillableCoursesError(row.student_id)
            pending_new = synthesize_entries(row, now.date())
            entries = pending_new

        outstanding = sum(max(0, entry.open_amount_cents()) for entry in entries)
        if settings.OVERPAYMENT_POLICY == OVERPAYMENT_REJECT and payment.amount_cents > outstanding:
            raise FeeValidationError(
                f"Payment of {payment.amount_cents} exceeds outstanding balance of {outstanding}"
            )

        created: List[LedgerEntry] = []
        if pending_new:
            created = await self.ledger.insert_entries(pending_new)
            entries = created
            logger.info(
                "Created %d fee records from course prices for student %s",
                len(created), row.student_id
            )

        updated, allocations, unapplied = allocate_payment(
            entries, payment.amount_cents, paid_on, method
        )
        if unapplied > 0:
            logger.warning(
                "Payment for student %s exceeds outstanding fees; %d cents not applied",
                row.student_id, unapplied
            )

        saved = [await self.ledger.save_payment(entry) for entry in updated]

        receipt = await self.receipts.insert_receipt(FeeReceipt(
            receipt_number=generate_receipt_number(now),
            student_id=row.student_id,
            fee_ids=[entry.id for entry in saved if entry.id],
            student_name=row.student_name,
            course_name=await self._receipt_course_name(saved, row.courses),
            amount_paid_cents=payment.amount_cents,
            payment_date=paid_on,
            payment_method=method,
            description=payment.description,
        ))
        logger.info(
            "Recorded payment %s of %d cents for student %s across %d fee records",
            receipt.receipt_number, payment.amount_cents, row.student_id, len(saved)
        )

        return PaymentResult(
            updated_entries=saved,
            created_entries=created,
            allocations=allocations,
            receipt=receipt,
            applied_cents=payment.amount_cents - unapplied,
            unapplied_cents=unapplied,
        )

    async def _receipt_course_name(self, entries: List[LedgerEntry], courses: List[CourseRef]) -> str:
        """Like receipt_course_name, but resolves a single entry's course when it is no longer active."""
        if len(entries) == 1 and entries[0].course_id:
            if entries[0].course_id not in {course.id for course in courses}:
                course = await self.courses.get_course(entries[0].course_id)
                return course.name if course else GENERAL_FEE
        return receipt_course_name(entries, courses)

    async def pay_entry(
        self,
        fee_id: str,
        payment: PaymentCreate,
        now: Optional[datetime] = None,
    ) -> PaymentResult:
        """Pay one fee record directly."""
        _validate_amount(payment.amount_cents)

        entry = await self.ledger.get_entry(fee_id)
        if entry is None:
            raise NotFoundError(f"Fee record {fee_id} not found")

        student = await self.students.get_student(entry.student_id)
        if student is None:
            raise NotFoundError(f"Student {entry.student_id} not found")
        course = await self.courses.get_course(entry.course_id)

        if now is None:
            now = datetime.now(timezone.utc)
        paid_on = payment.payment_date or now.date()
        method = payment.payment_method or settings.DEFAULT_PAYMENT_METHOD

        saved = await self.ledger.save_payment(
            apply_direct_payment(entry, payment.amount_cents, paid_on, method)
        )

        receipt = await self.receipts.insert_receipt(FeeReceipt(
            receipt_number=generate_receipt_number(now),
            student_id=entry.student_id,
            fee_ids=[saved.id],
            student_name=student.full_name,
            course_name=course.name if course else GENERAL_FEE,
            amount_paid_cents=payment.amount_cents,
            payment_date=paid_on,
            payment_method=method,
            description=payment.description or entry.description,
        ))
        logger.info(
            "Recorded payment %s of %d cents on fee record %s",
            receipt.receipt_number, payment.amount_cents, fee_id
        )

        return PaymentResult(
            updated_entries=[saved],
            allocations=[Allocation(fee_id=saved.id, allocated_cents=payment.amount_cents)],
            receipt=receipt,
            applied_cents=payment.amount_cents,
        )
