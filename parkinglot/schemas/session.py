from datetime import datetime

from parkinglot.schemas.common import BaseSchema
from parkinglot.schemas.parking import SpotResponse
from parkinglot.schemas.payment import CardDetails, PaymentResponse, UPIDetails
from parkinglot.schemas.vehicle import VehicleIn, VehicleResponse
from parkinglot.utils.constants import PaymentMethod


class SessionResponse(BaseSchema):
    id: int
    ticket_number: str
    vehicle: VehicleResponse
    spot_id: str
    reservation_id: int | None = None
    entry_time: datetime
    exit_time: datetime | None = None


class SessionListResponse(BaseSchema):
    sessions: list[SessionResponse]
    total: int


class CheckInRequest(BaseSchema):
    vehicle: VehicleIn


class ReservedCheckInRequest(BaseSchema):
    license_plate: str


class CheckInResponse(BaseSchema):
    session: SessionResponse
    ticket_number: str
    spot: SpotResponse


class CheckoutQuote(BaseSchema):
    session: SessionResponse
    duration_hours: float
    fee: float
    subscribed: bool
    payment: PaymentResponse


class CheckoutRequest(BaseSchema):
    payment_method: PaymentMethod | None = None
    card: CardDetails | None = None
    upi: UPIDetails | None = None


class CheckoutFinalizeRequest(BaseSchema):
    success: bool


class CheckoutResult(BaseSchema):
    session: SessionResponse
    payment: PaymentResponse | None = None
    paid: bool
    released_spot_id: str | None = None
