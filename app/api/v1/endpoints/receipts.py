from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.errors import to_http_exception
from app.core.auth import StaffPrincipal, require_permission
from app.core.exceptions import FeeError
from app.db.mongo import get_db
from app.models.receipt import FeeReceipt
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.receipt import ReceiptFilter

router = APIRouter()


@router.get("/", response_model=List[FeeReceipt])
async def list_receipts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    current_staff: StaffPrincipal = Depends(require_permission("view_receipts")),
    db = Depends(get_db)
):
    """Receipts in a payment-date window (default: this month so far)"""
    today = date.today()
    filters = ReceiptFilter(
        start_date=start_date or today.replace(day=1),
        end_date=end_date or today,
        search=search
    )
    try:
        return await ReceiptRepository(db).list_receipts(filters)
    except FeeError as e:
        raise to_http_exception(e)


@router.get("/{receipt_number}", response_model=FeeReceipt)
async def get_receipt(
    receipt_number: str,
    current_staff: StaffPrincipal = Depends(require_permission("view_receipts")),
    db = Depends(get_db)
):
    try:
        receipt = await ReceiptRepository(db).get_by_number(receipt_number)
    except FeeError as e:
        raise to_http_exception(e)

    if receipt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Receipt not found"
        )
    return receipt
