from datetime import date
from typing import List, Optional
from pydantic import BaseModel

from app.models.ledger import LedgerEntry
from app.models.receipt import FeeReceipt
from app.schemas.fee import AggregatedFeeView


class PaymentCreate(BaseModel):
    """Request body to pay a fee or a student's aggregated balance."""
    amount_cents: int
    payment_method: Optional[str] = None
    payment_date: Optional[date] = None
    description: str = ""


class Allocation(BaseModel):
    """Portion of one payment applied to one ledger entry."""
    fee_id: Optional[str]
    allocated_cents: int


class PaymentResult(BaseModel):
    updated_entries: List[LedgerEntry]
    created_entries: List[LedgerEntry] = []
    allocations: List[Allocation] = []
    receipt: FeeReceipt
    applied_cents: int
    unapplied_cents: int = 0


class StudentPaymentResponse(BaseModel):
    """Payment outcome plus the row re-aggregated after the writes."""
    payment: PaymentResult
    fee_view: Optional[AggregatedFeeView] = None
