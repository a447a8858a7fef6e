from collections import defaultdict
from datetime import date

from parkinglot.domain.lot import ParkingLot
from parkinglot.schemas.report import (
    DashboardSummary,
    SecurityLogEntry,
    SecurityLogReport,
    TransactionSummary,
)
from parkinglot.schemas.session import SessionResponse
from parkinglot.services import parking as parking_service
from parkinglot.utils.constants import PaymentStatus


def get_security_logs(
    lot: ParkingLot,
    license_plate: str | None = None,
    day: date | None = None,
) -> SecurityLogReport:
    """Entry/exit history grouped by plate, optionally for one plate or day."""
    with lot.lock:
        if day is not None:
            grouped: dict[str, list] = defaultdict(list)
            for session in lot.sessions.security_log_by_date(day):
                grouped[session.vehicle.license_plate].append(session)
            logs = dict(grouped)
            if license_plate:
                plate = license_plate.strip().upper()
                logs = {k: v for k, v in logs.items() if k == plate}
        else:
            logs = lot.sessions.security_log(license_plate)

    entries = [
        SecurityLogEntry(
            license_plate=plate,
            sessions=[SessionResponse.model_validate(s) for s in sessions],
        )
        for plate, sessions in logs.items()
    ]
    return SecurityLogReport(
        entries=entries,
        day=day,
        total_sessions=sum(len(e.sessions) for e in entries),
    )


def get_transaction_summary(lot: ParkingLot) -> TransactionSummary:
    with lot.lock:
        payments = lot.payments.all()

    revenue_by_method: dict[str, float] = defaultdict(float)
    total_revenue = 0.0
    for payment in payments:
        if payment.status != PaymentStatus.COMPLETED:
            continue
        total_revenue += payment.amount
        method = payment.method.value if payment.method else "none"
        revenue_by_method[method] += payment.amount

    return TransactionSummary(
        total_payments=len(payments),
        completed=sum(1 for p in payments if p.status == PaymentStatus.COMPLETED),
        failed=sum(1 for p in payments if p.status == PaymentStatus.FAILED),
        pending=sum(1 for p in payments if p.status == PaymentStatus.PENDING),
        total_revenue=round(total_revenue, 2),
        revenue_by_method={k: round(v, 2) for k, v in revenue_by_method.items()},
    )


def get_dashboard_summary(lot: ParkingLot) -> DashboardSummary:
    with lot.lock:
        now = lot.now()
        today = now.date()
        availability = parking_service.get_availability(lot)
        today_revenue = sum(
            p.amount
            for p in lot.payments.all()
            if p.status == PaymentStatus.COMPLETED and p.paid_at and p.paid_at.date() == today
        )
        return DashboardSummary(
            availability=availability,
            parked_vehicles=len(lot.sessions.list_open()),
            active_reservations=len(lot.reservations.list_active(now)),
            active_subscriptions=len(lot.subscriptions.list_active(now)),
            today_entries=len(lot.sessions.security_log_by_date(today)),
            today_revenue=round(today_revenue, 2),
        )
