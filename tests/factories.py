"""Builders for fee records used across the test suite."""
from datetime import date
from typing import List, Optional

from bson import ObjectId

from app.models.course import Course
from app.models.ledger import FeeStatus, LedgerEntry
from app.models.receipt import FeeReceipt
from app.models.student import Student


def new_id() -> str:
    return str(ObjectId())


def make_student(
    student_id: Optional[str] = None,
    course_id: Optional[str] = None,
    enrolled: Optional[List[str]] = None,
    first_name: str = "Asha",
    last_name: str = "Rao",
) -> Student:
    return Student(
        id=student_id or new_id(),
        first_name=first_name,
        last_name=last_name,
        course_id=course_id,
        enrolled_course_ids=enrolled or [],
    )


def make_course(course_id: Optional[str] = None, name: str = "Maths", price_cents: int = 1000) -> Course:
    return Course(id=course_id or new_id(), name=name, price_cents=price_cents)


def make_entry(
    student_id: str,
    amount_cents: int,
    paid_amount_cents: int = 0,
    due_date: date = date(2024, 1, 1),
    status: FeeStatus = FeeStatus.PENDING,
    entry_id: Optional[str] = None,
    course_id: Optional[str] = None,
    paid_date: Optional[date] = None,
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id or new_id(),
        student_id=student_id,
        course_id=course_id,
        amount_cents=amount_cents,
        paid_amount_cents=paid_amount_cents,
        due_date=due_date,
        status=status,
        paid_date=paid_date,
    )


def make_receipt(student_id: str, amount_cents: int, receipt_number: str = "RCP-1-1") -> FeeReceipt:
    return FeeReceipt(
        id=new_id(),
        receipt_number=receipt_number,
        student_id=student_id,
        student_name="Asha Rao",
        course_name="Maths",
        amount_paid_cents=amount_cents,
        payment_date=date(2024, 3, 15),
        payment_method="cash",
    )
