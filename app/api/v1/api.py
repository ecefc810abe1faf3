from fastapi import APIRouter
from app.api.v1.endpoints import fees, receipts, reminders

api_router = APIRouter()

api_router.include_router(fees.router, prefix="/fees", tags=["fees"])
api_router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
