"""
Fee reminders.

The service resolves a fee record to its student and guardian, renders the
message and hands it to a NotificationSender. Delivery is not implemented
here: the default sender only records the message in `communications`.
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.exceptions import FeeError, NotFoundError
from app.models.communication import Communication
from app.models.ledger import FeeStatus, FeeType, LedgerEntry
from app.models.student import Guardian, Student
from app.repositories.communication_repo import CommunicationRepository
from app.repositories.ledger_repo import LedgerRepository
from app.repositories.student_repo import StudentRepository
from app.schemas.reminder import ReminderOutcome, ReminderResult

logger = logging.getLogger(__name__)


class NotificationSender:
    """Records outbound reminders; swap in a real transport by subclassing."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.communications = CommunicationRepository(db)

    async def send(
        self,
        student_id: str,
        fee_id: Optional[str],
        recipient: Optional[str],
        subject: str,
        body: str,
    ) -> None:
        await self.communications.log(Communication(
            student_id=student_id,
            fee_id=fee_id,
            type="email",
            subject=subject,
            message=body,
            recipient=recipient,
            status="sent",
        ))


def format_cents(amount_cents: int) -> str:
    return f"{amount_cents / 100:.2f}"


def render_fee_reminder(
    student: Student,
    guardian: Optional[Guardian],
    entry: LedgerEntry,
) -> Tuple[str, str]:
    """Subject and body of a fee reminder email."""
    fee_type = FeeType(entry.fee_type).value
    parent_name = guardian.full_name if guardian else "Parent/Guardian"
    subject = f"Fee Reminder - {fee_type} for {student.full_name}"

    lines = [
        f"Dear {parent_name},",
        "",
        f"This is a friendly reminder that a fee payment is due for {student.full_name}.",
        "",
        "Fee Details:",
        f"- Type: {fee_type.capitalize()} Fee",
        f"- Amount: {format_cents(entry.amount_cents)}",
        f"- Outstanding: {format_cents(max(0, entry.open_amount_cents()))}",
        f"- Due Date: {entry.due_date.isoformat()}",
    ]
    if entry.description:
        lines += ["", f"Description: {entry.description}"]
    lines += [
        "",
        "If you have already made the payment, please disregard this reminder.",
        "",
        "Best regards,",
        f"{settings.SCHOOL_NAME} Administration Team",
    ]
    return subject, "\n".join(lines)


def is_reminder_due(entry: LedgerEntry, today: date) -> bool:
    """Due N days ahead (N in REMINDER_DAYS_BEFORE_DUE), or overdue by a multiple of the interval."""
    days_until_due = (entry.due_date - today).days
    if days_until_due in settings.REMINDER_DAYS_BEFORE_DUE:
        return True
    interval = settings.REMINDER_OVERDUE_INTERVAL_DAYS
    return days_until_due < 0 and interval > 0 and (-days_until_due) % interval == 0


class ReminderService:
    def __init__(self, db: AsyncIOMotorDatabase, sender: Optional[NotificationSender] = None):
        self.ledger = LedgerRepository(db)
        self.students = StudentRepository(db)
        self.sender = sender or NotificationSender(db)

    async def send_fee_reminder(self, fee_id: str) -> int:
        """Send one reminder; returns the number sent (1)."""
        entry = await self.ledger.get_entry(fee_id)
        if entry is None:
            raise NotFoundError(f"Fee record {fee_id} not found")

        student = await self.students.get_student(entry.student_id)
        if student is None:
            raise NotFoundError(f"Student {entry.student_id} not found")
        guardian = await self.students.get_guardian(student.parent_id)

        subject, body = render_fee_reminder(student, guardian, entry)
        recipient = (guardian.email if guardian and guardian.email else student.email)
        await self.sender.send(student.id, entry.id, recipient, subject, body)

        logger.info("Sent fee reminder for fee record %s to %s", fee_id, recipient)
        return 1

    async def send_bulk_fee_reminders(self, fee_ids: List[str]) -> ReminderResult:
        """Try every id; failures are reported per id, not raised."""
        results: List[ReminderOutcome] = []
        for fee_id in fee_ids:
            try:
                await self.send_fee_reminder(fee_id)
                results.append(ReminderOutcome(fee_id=fee_id, success=True))
            except FeeError as e:
                logger.warning("Fee reminder for %s failed: %s", fee_id, e)
                results.append(ReminderOutcome(fee_id=fee_id, success=False, error=str(e)))

        sent = sum(1 for r in results if r.success)
        return ReminderResult(
            sent=sent,
            total=len(fee_ids),
            message=f"{sent} of {len(fee_ids)} reminders sent successfully",
            results=results,
        )

    async def send_scheduled_reminders(self, today: Optional[date] = None) -> ReminderResult:
        """Send reminders for every unpaid fee whose reminder falls on `today`."""
        if today is None:
            today = datetime.now(timezone.utc).date()

        entries = await self.ledger.list_entries(statuses=[FeeStatus.PENDING, FeeStatus.OVERDUE])
        due_ids = [e.id for e in entries if is_reminder_due(e, today)]
        if not due_ids:
            return ReminderResult(sent=0, total=0, message="No reminders to send at this time")

        logger.info("Sending %d scheduled fee reminders for %s", len(due_ids), today)
        return await self.send_bulk_fee_reminders(due_ids)
