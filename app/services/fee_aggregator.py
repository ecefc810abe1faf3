"""
Fee aggregation - one consolidated fee row per student.

Pure functions over already-fetched students, courses and ledger entries.
No database access and no hidden state: the same input always yields equal
rows, so callers re-run `aggregate` after every confirmed write instead of
patching cached rows.

Algorithm:
1. Course list per student: primary course first, then enrolled courses
   not already present (by id)
2. Group ledger entries by student
3. Sum amount / paid over the entries; with no entries but some courses,
   the expected total is the sum of course prices and nothing is paid
4. remaining = max(0, total - paid)
5. Status from (paid, remaining)
6. Earliest due date (today when there are no entries), latest paid date
7. Drop students with neither entries nor courses
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from app.models.course import Course
from app.models.ledger import FeeStatus, LedgerEntry
from app.models.student import Student
from app.schemas.fee import AggregatedFeeView, CourseRef


def merge_courses(student: Student, courses_by_id: Dict[str, Course]) -> List[Course]:
    """Primary course first, then enrolled courses, de-duplicated by id."""
    ordered: List[Course] = []
    seen = set()

    course_ids = [student.course_id] if student.course_id else []
    course_ids.extend(student.enrolled_course_ids)

    for course_id in course_ids:
        if course_id in seen:
            continue
        course = courses_by_id.get(course_id)
        if course is None:
            # Inactive or deleted course; nothing to bill
            continue
        seen.add(course_id)
        ordered.append(course)

    return ordered


def derive_status(total_paid_cents: int, remaining_cents: int) -> FeeStatus:
    """
    Status of an aggregated balance. Order matters:
    (0, 500) -> pending, (300, 200) -> partial, (500, 0) -> paid,
    (0, 0) -> pending.
    """
    if remaining_cents > 0 and total_paid_cents > 0:
        return FeeStatus.PARTIAL
    if remaining_cents <= 0 and total_paid_cents > 0:
        return FeeStatus.PAID
    return FeeStatus.PENDING


def group_by_student(entries: Iterable[LedgerEntry]) -> Dict[str, List[LedgerEntry]]:
    grouped: Dict[str, List[LedgerEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.student_id].append(entry)
    return grouped


def build_view(
    student: Student,
    courses: List[Course],
    entries: List[LedgerEntry],
    today: date,
) -> Optional[AggregatedFeeView]:
    """Aggregate one student's entries, or None when there is nothing to show."""
    if not entries and not courses:
        return None

    if entries:
        total_amount = sum(entry.amount_cents or 0 for entry in entries)
        total_paid = sum(entry.paid_amount_cents or 0 for entry in entries)
    else:
        # Not billed yet: expected total from course prices
        total_amount = sum(course.price_cents for course in courses)
        total_paid = 0

    remaining = max(0, total_amount - total_paid)

    earliest_due = min((entry.due_date for entry in entries), default=today)
    paid_dates = [entry.paid_date for entry in entries if entry.paid_date is not None]
    latest_paid = max(paid_dates) if paid_dates else None

    return AggregatedFeeView(
        student_id=student.id,
        student_name=student.full_name,
        courses=[
            CourseRef(id=course.id, name=course.name, price_cents=course.price_cents)
            for course in courses
        ],
        total_amount_cents=total_amount,
        total_paid_cents=total_paid,
        remaining_cents=remaining,
        status=derive_status(total_paid, remaining),
        earliest_due_date=earliest_due,
        latest_paid_date=latest_paid,
        expected_only=not entries,
        entries=list(entries),
    )


def aggregate(
    students: List[Student],
    courses: List[Course],
    ledger_entries: List[LedgerEntry],
    today: Optional[date] = None,
) -> List[AggregatedFeeView]:
    """One AggregatedFeeView per student with at least one entry or course."""
    if today is None:
        today = date.today()

    courses_by_id = {course.id: course for course in courses}
    entries_by_student = group_by_student(ledger_entries)

    views: List[AggregatedFeeView] = []
    for student in students:
        view = build_view(
            student,
            merge_courses(student, courses_by_id),
            entries_by_student.get(student.id, []),
            today,
        )
        if view is not None:
            views.append(view)

    return views
