from typing import List, Optional
from pydantic import BaseModel


class BulkReminderRequest(BaseModel):
    fee_ids: List[str]


class ReminderOutcome(BaseModel):
    fee_id: str
    success: bool
    error: Optional[str] = None


class ReminderResult(BaseModel):
    sent: int
    total: int
    message: str
    results: List[ReminderOutcome] = []
