from datetime import datetime
from pydantic import Field
from app.models.base import MongoModel, _utcnow


class Communication(MongoModel):
    """Log line for one outbound message (reminders)."""
    student_id: str
    fee_id: str | None = None
    type: str = "email"  # email | sms | whatsapp
    subject: str
    message: str
    recipient: str | None = None
    status: str = "sent"  # sent | failed | pending
    created_at: datetime = Field(default_factory=_utcnow)
