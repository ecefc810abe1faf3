from datetime import date
from typing import Optional
from pydantic import BaseModel


class ReceiptFilter(BaseModel):
    """Receipt listing window; both ends inclusive."""
    start_date: date
    end_date: date
    search: Optional[str] = None
