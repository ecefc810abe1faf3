from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from app.api.v1.errors import to_http_exception
from app.core.auth import StaffPrincipal, require_permission
from app.core.exceptions import FeeError
from app.db.mongo import get_db
from app.schemas.reminder import BulkReminderRequest, ReminderOutcome, ReminderResult
from app.services.reminder_service import ReminderService

router = APIRouter()


@router.post("/fees/bulk", response_model=ReminderResult)
async def send_bulk_fee_reminders(
    request: BulkReminderRequest,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    return await ReminderService(db).send_bulk_fee_reminders(request.fee_ids)


@router.post("/fees/scheduled", response_model=ReminderResult)
async def send_scheduled_fee_reminders(
    as_of: Optional[date] = None,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    try:
        return await ReminderService(db).send_scheduled_reminders(as_of)
    except FeeError as e:
        raise to_http_exception(e)


@router.post("/fees/{fee_id}", response_model=ReminderResult)
async def send_fee_reminder(
    fee_id: str,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    try:
        sent = await ReminderService(db).send_fee_reminder(fee_id)
    except FeeError as e:
        raise to_http_exception(e)

    return ReminderResult(
        sent=sent,
        total=1,
        message="Fee reminder sent successfully",
        results=[ReminderOutcome(fee_id=fee_id, success=True)]
    )
