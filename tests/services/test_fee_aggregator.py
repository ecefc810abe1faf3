"""
Tests for fee aggregation.

Covers:
- Ledger sums per student
- Expected totals from course prices when nothing is billed yet
- Status rule table
- Course merge order and de-duplication
- Due / paid date selection
- Purity (same input, same rows)
"""

import pytest
from datetime import date

from app.models.ledger import FeeStatus
from app.services.fee_aggregator import aggregate, derive_status, merge_courses
from tests.factories import make_course, make_entry, make_student

TODAY = date(2024, 3, 15)


def test_totals_are_sums_of_ledger_entries():
    student = make_student()
    entries = [
        make_entry(student.id, 500, 200),
        make_entry(student.id, 300, 0, due_date=date(2024, 2, 1)),
        make_entry(student.id, 1200, 1200, status=FeeStatus.PAID),
    ]

    [view] = aggregate([student], [], entries, TODAY)

    assert view.total_amount_cents == 2000
    assert view.total_paid_cents == 1400
    assert view.remaining_cents == 600
    assert view.status == FeeStatus.PARTIAL
    assert view.expected_only is False
    assert len(view.entries) == 3


def test_entries_of_other_students_are_not_counted():
    alice = make_student(first_name="Alice")
    bob = make_student(first_name="Bob")
    entries = [make_entry(alice.id, 500), make_entry(bob.id, 700, 700)]

    views = aggregate([alice, bob], [], entries, TODAY)

    by_student = {v.student_id: v for v in views}
    assert by_student[alice.id].total_amount_cents == 500
    assert by_student[bob.id].total_paid_cents == 700
    assert by_student[bob.id].status == FeeStatus.PAID


def test_expected_total_from_course_prices_when_unbilled():
    c1 = make_course(name="Maths", price_cents=1000)
    c2 = make_course(name="Physics", price_cents=1500)
    student = make_student(course_id=c1.id, enrolled=[c2.id])

    [view] = aggregate([student], [c1, c2], [], TODAY)

    assert view.total_amount_cents == 2500
    assert view.total_paid_cents == 0
    assert view.remaining_cents == 2500
    assert view.status == FeeStatus.PENDING
    assert view.expected_only is True
    assert view.earliest_due_date == TODAY
    assert view.latest_paid_date is None


def test_ledger_entries_win_over_course_prices():
    course = make_course(price_cents=9999)
    student = make_student(course_id=course.id)

    [view] = aggregate([student], [course], [make_entry(student.id, 400)], TODAY)

    assert view.total_amount_cents == 400
    assert view.expected_only is False


@pytest.mark.parametrize("paid, remaining, expected", [
    (0, 500, FeeStatus.PENDING),
    (300, 200, FeeStatus.PARTIAL),
    (500, 0, FeeStatus.PAID),
    (0, 0, FeeStatus.PENDING),
])
def test_status_rule(paid, remaining, expected):
    assert derive_status(paid, remaining) == expected


def test_overpaid_balance_clamps_remaining_at_zero():
    student = make_student()

    [view] = aggregate([student], [], [make_entry(student.id, 500, 800, status=FeeStatus.PAID)], TODAY)

    assert view.remaining_cents == 0
    assert view.status == FeeStatus.PAID


def test_merge_courses_puts_primary_first_and_dedupes():
    primary = make_course(name="Primary")
    other = make_course(name="Other")
    student = make_student(course_id=primary.id, enrolled=[other.id, primary.id, other.id])

    merged = merge_courses(student, {primary.id: primary, other.id: other})

    assert [c.name for c in merged] == ["Primary", "Other"]


def test_merge_courses_skips_unknown_course_ids():
    known = make_course()
    student = make_student(course_id="missing", enrolled=[known.id])

    assert merge_courses(student, {known.id: known}) == [known]


def test_due_and_paid_dates():
    student = make_student()
    entries = [
        make_entry(student.id, 100, 100, due_date=date(2024, 2, 1),
                   status=FeeStatus.PAID, paid_date=date(2024, 2, 3)),
        make_entry(student.id, 100, 100, due_date=date(2024, 1, 1),
                   status=FeeStatus.PAID, paid_date=date(2024, 1, 20)),
        make_entry(student.id, 100, 0, due_date=date(2024, 3, 1)),
    ]

    [view] = aggregate([student], [], entries, TODAY)

    assert view.earliest_due_date == date(2024, 1, 1)
    assert view.latest_paid_date == date(2024, 2, 3)


def test_students_without_entries_or_courses_are_dropped():
    billed = make_student(first_name="Billed")
    idle = make_student(first_name="Idle")

    views = aggregate([billed, idle], [], [make_entry(billed.id, 100)], TODAY)

    assert [v.student_id for v in views] == [billed.id]


def test_aggregate_is_repeatable():
    course = make_course(price_cents=700)
    s1 = make_student(course_id=course.id)
    s2 = make_student()
    entries = [make_entry(s2.id, 500, 100)]

    first = aggregate([s1, s2], [course], entries, TODAY)
    second = aggregate([s1, s2], [course], entries, TODAY)

    assert first == second
    assert [v.model_dump() for v in first] == [v.model_dump() for v in second]
