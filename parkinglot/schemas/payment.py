from datetime import datetime

from pydantic import Field

from parkinglot.schemas.common import BaseSchema
from parkinglot.utils.constants import PaymentMethod, PaymentStatus, SpotCategory, VehicleCategory


class CardDetails(BaseSchema):
    card_number: str
    expiry_date: str
    cvv: str
    card_holder_name: str


class UPIDetails(BaseSchema):
    upi_id: str


class PaymentResponse(BaseSchema):
    id: int
    receipt_number: str
    license_plate: str
    amount: float
    session_id: int | None = None
    method: PaymentMethod | None = None
    status: PaymentStatus
    created_at: datetime
    paid_at: datetime | None = None


class PaymentListResponse(BaseSchema):
    payments: list[PaymentResponse]
    total: int
    total_amount: float


class FeeQuoteRequest(BaseSchema):
    vehicle_type: VehicleCategory
    spot_type: SpotCategory
    hours: float = Field(ge=0)


class FeeQuoteResponse(BaseSchema):
    vehicle_type: VehicleCategory
    spot_type: SpotCategory
    hours: float
    surcharge: float
    fee: float


class RateUpdate(BaseSchema):
    vehicle_type: VehicleCategory
    rate: float = Field(ge=0)


class MultiplierUpdate(BaseSchema):
    spot_type: SpotCategory
    multiplier: float = Field(ge=0)


class RateTable(BaseSchema):
    base_rates: dict[VehicleCategory, float]
    spot_multipliers: dict[SpotCategory, float]
    peak_surcharge: float
    weekend_surcharge: float
