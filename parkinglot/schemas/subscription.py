from datetime import datetime

from pydantic import Field

from parkinglot.schemas.common import BaseSchema
from parkinglot.schemas.payment import CardDetails, PaymentResponse, UPIDetails
from parkinglot.schemas.vehicle import VehicleIn, VehicleResponse
from parkinglot.utils.constants import PaymentMethod, SpotCategory, SubscriptionPlan


class SubscriptionCreate(BaseSchema):
    vehicle: VehicleIn
    plan: SubscriptionPlan
    spot_type: SpotCategory
    payment_method: PaymentMethod
    card: CardDetails | None = None
    upi: UPIDetails | None = None


class SubscriptionRenew(BaseSchema):
    months: int = Field(ge=1)


class SubscriptionResponse(BaseSchema):
    id: str
    vehicle: VehicleResponse
    plan: SubscriptionPlan
    spot_category: SpotCategory
    start_date: datetime
    end_date: datetime
    fee: float
    active: bool


class SubscriptionStatus(BaseSchema):
    license_plate: str
    is_active: bool
    subscription: SubscriptionResponse | None = None


class SubscriptionCreateResponse(BaseSchema):
    subscription: SubscriptionResponse
    payment: PaymentResponse


class SubscriptionQuote(BaseSchema):
    plan: SubscriptionPlan
    spot_type: SpotCategory
    fee: float
