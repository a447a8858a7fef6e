from datetime import date

from fastapi import APIRouter, Query

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.report import DashboardSummary, SecurityLogReport, TransactionSummary
from parkinglot.services import report as report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(lot: Lot):
    return report_service.get_dashboard_summary(lot)


@router.get("/security-logs", response_model=SecurityLogReport)
async def get_security_logs(
    lot: Lot,
    license_plate: str | None = Query(None),
    day: date | None = Query(None),
):
    return report_service.get_security_logs(lot, license_plate, day)


@router.get("/transactions", response_model=TransactionSummary)
async def get_transactions(lot: Lot):
    return report_service.get_transaction_summary(lot)
