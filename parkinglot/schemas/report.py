from datetime import date

from parkinglot.schemas.common import BaseSchema
from parkinglot.schemas.parking import AvailabilityResponse
from parkinglot.schemas.session import SessionResponse


class SecurityLogEntry(BaseSchema):
    license_plate: str
    sessions: list[SessionResponse]


class SecurityLogReport(BaseSchema):
    entries: list[SecurityLogEntry]
    day: date | None = None
    total_sessions: int


class TransactionSummary(BaseSchema):
    total_payments: int
    completed: int
    failed: int
    pending: int
    total_revenue: float
    revenue_by_method: dict[str, float]


class DashboardSummary(BaseSchema):
    availability: AvailabilityResponse
    parked_vehicles: int
    active_reservations: int
    active_subscriptions: int
    today_entries: int
    today_revenue: float
