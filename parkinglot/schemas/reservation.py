from datetime import datetime

from pydantic import model_validator

from parkinglot.schemas.common import BaseSchema, TimestampSchema
from parkinglot.schemas.vehicle import VehicleIn, VehicleResponse
from parkinglot.utils.constants import ReservationStatus
from parkinglot.utils.timeutils import as_utc


class ReservationBase(BaseSchema):
    start_time: datetime
    end_time: datetime


class ReservationCreate(ReservationBase):
    vehicle: VehicleIn

    @model_validator(mode="after")
    def validate_window(self) -> "ReservationCreate":
        if as_utc(self.start_time) >= as_utc(self.end_time):
            raise ValueError("Reservation start time must be before end time")
        return self


class ReservationResponse(ReservationBase, TimestampSchema):
    id: int
    confirmation_number: str
    spot_id: str
    vehicle: VehicleResponse
    status: ReservationStatus
    cancelled_at: datetime | None = None


class ReservationListResponse(BaseSchema):
    reservations: list[ReservationResponse]
    total: int


class ReservationCancelResponse(BaseSchema):
    license_plate: str
    cancelled: bool
