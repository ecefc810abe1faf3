from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.v1.errors import to_http_exception
from app.core.auth import StaffPrincipal, require_permission
from app.core.exceptions import FeeError
from app.db.mongo import get_db
from app.models.ledger import FeeStatus, LedgerEntry
from app.schemas.fee import (
    AggregatedFeeView,
    FeeCreate,
    FeeFilter,
    FeeSummary,
    OverdueRefreshResponse,
)
from app.schemas.payment import PaymentCreate, PaymentResult, StudentPaymentResponse
from app.services.fee_service import FeeService
from app.services.payment_service import PaymentService

router = APIRouter()


@router.get("/overview", response_model=List[AggregatedFeeView])
async def list_fee_overview(
    current_staff: StaffPrincipal = Depends(require_permission("view_fees")),
    db = Depends(get_db)
):
    """Aggregated fee row per active student"""
    try:
        return await FeeService(db).load_fee_views()
    except FeeError as e:
        raise to_http_exception(e)


@router.get("/overview/{student_id}", response_model=AggregatedFeeView)
async def get_student_fee_overview(
    student_id: str,
    current_staff: StaffPrincipal = Depends(require_permission("view_fees")),
    db = Depends(get_db)
):
    try:
        view = await FeeService(db).get_fee_view(student_id)
    except FeeError as e:
        raise to_http_exception(e)

    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No fees or courses for this student"
        )
    return view


@router.get("/summary", response_model=FeeSummary)
async def get_fee_summary(
    current_staff: StaffPrincipal = Depends(require_permission("view_fees")),
    db = Depends(get_db)
):
    try:
        return await FeeService(db).summarize()
    except FeeError as e:
        raise to_http_exception(e)


@router.get("/", response_model=List[LedgerEntry])
async def list_fees(
    student_id: Optional[str] = None,
    fee_status: Optional[FeeStatus] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    current_staff: StaffPrincipal = Depends(require_permission("view_fees")),
    db = Depends(get_db)
):
    """List fee records, latest due date first"""
    filters = FeeFilter(student_id=student_id, status=fee_status, search=search)
    try:
        return await FeeService(db).list_fees(filters)
    except FeeError as e:
        raise to_http_exception(e)


@router.post("/", response_model=LedgerEntry, status_code=status.HTTP_201_CREATED)
async def create_fee(
    fee_in: FeeCreate,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    try:
        return await FeeService(db).create_fee(fee_in)
    except FeeError as e:
        raise to_http_exception(e)


@router.post("/overdue/refresh", response_model=OverdueRefreshResponse)
async def refresh_overdue_fees(
    as_of: Optional[date] = None,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    try:
        return await FeeService(db).refresh_overdue(as_of)
    except FeeError as e:
        raise to_http_exception(e)


@router.post("/students/{student_id}/payments", response_model=StudentPaymentResponse)
async def pay_student_fees(
    student_id: str,
    payment_in: PaymentCreate,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    """Spread a payment over the student's open fees, earliest due first"""
    try:
        return await FeeService(db).pay_student(student_id, payment_in)
    except FeeError as e:
        raise to_http_exception(e)


@router.post("/{fee_id}/payments", response_model=PaymentResult)
async def pay_fee(
    fee_id: str,
    payment_in: PaymentCreate,
    current_staff: StaffPrincipal = Depends(require_permission("manage_fees")),
    db = Depends(get_db)
):
    """Pay a single fee record"""
    try:
        return await PaymentService(db).pay_entry(fee_id, payment_in)
    except FeeError as e:
        raise to_http_exception(e)
