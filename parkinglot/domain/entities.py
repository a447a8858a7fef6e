"""
In-memory entities of a parking lot.

Entities reference each other by id (spot id, reservation id, session id,
license plate) and are resolved through the registry that owns them.
"""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from parkinglot.core.exceptions import InvalidCategoryError, InvalidReservationError
from parkinglot.schemas.common import BaseSchema
from parkinglot.utils.constants import (
    ACTIVE_RESERVATION_STATUSES,
    MAX_LICENSE_PLATE_LENGTH,
    RESERVATION_TRANSITIONS,
    SPOT_COMPATIBILITY,
    PaymentMethod,
    PaymentStatus,
    ReservationStatus,
    SpotCategory,
    SpotState,
    SubscriptionPlan,
    VehicleCategory,
)
from parkinglot.utils.timeutils import as_utc


def parse_vehicle_category(value: VehicleCategory | str) -> VehicleCategory:
    if isinstance(value, VehicleCategory):
        return value
    try:
        return VehicleCategory(str(value).strip().lower())
    except ValueError:
        raise InvalidCategoryError(f"Invalid vehicle type: {value}") from None


def parse_spot_category(value: SpotCategory | str) -> SpotCategory:
    if isinstance(value, SpotCategory):
        return value
    try:
        return SpotCategory(str(value).strip().lower())
    except ValueError:
        raise InvalidCategoryError(f"Invalid parking spot type: {value}") from None


def normalize_plate(value: str) -> str:
    plate = value.strip()
    if not plate:
        raise ValueError("License plate cannot be empty")
    if len(plate) > MAX_LICENSE_PLATE_LENGTH:
        raise ValueError(
            f"License plate cannot exceed {MAX_LICENSE_PLATE_LENGTH} characters"
        )
    return plate.upper()


def plate_key(value: str) -> str:
    """Lookup key for a plate as typed by a user."""
    return value.strip().upper()


def _utc_or_none(value: datetime | None) -> datetime | None:
    return as_utc(value) if value is not None else None


class Entity(BaseSchema):
    model_config = ConfigDict(from_attributes=True, validate_assignment=True)


class Vehicle(BaseSchema):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    license_plate: str
    category: VehicleCategory
    accessibility_permit: bool = False

    @field_validator("license_plate")
    @classmethod
    def validate_license_plate(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        return parse_vehicle_category(v)


class Spot(Entity):
    id: str
    category: SpotCategory
    state: SpotState = SpotState.FREE
    vehicle_plate: str | None = None
    reservation_id: int | None = None

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        return parse_spot_category(v)

    def is_available(self) -> bool:
        return self.state == SpotState.FREE and self.reservation_id is None

    def can_fit(self, vehicle_category: VehicleCategory | str) -> bool:
        return parse_vehicle_category(vehicle_category) in SPOT_COMPATIBILITY[self.category]


class Reservation(Entity):
    id: int
    confirmation_number: str
    spot_id: str
    vehicle: Vehicle
    start_time: datetime
    end_time: datetime
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: datetime | None = None
    cancelled_at: datetime | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_window_bound(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("created_at", "cancelled_at")
    @classmethod
    def validate_timestamp(cls, v: datetime | None) -> datetime | None:
        return _utc_or_none(v)

    def is_active(self, now: datetime) -> bool:
        # bounds are exclusive on both ends
        now = as_utc(now)
        return (
            self.status in ACTIVE_RESERVATION_STATUSES
            and self.start_time < now < self.end_time
        )

    def is_live(self, now: datetime) -> bool:
        """Active now or still upcoming."""
        return self.status in ACTIVE_RESERVATION_STATUSES and as_utc(now) < self.end_time

    def has_expired(self, now: datetime) -> bool:
        return self.status == ReservationStatus.PENDING and as_utc(now) >= self.end_time

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return not (as_utc(end) <= self.start_time or as_utc(start) >= self.end_time)

    def belongs_to(self, license_plate: str) -> bool:
        return self.vehicle.license_plate == plate_key(license_plate)

    def transition_to(self, status: ReservationStatus) -> None:
        if status not in RESERVATION_TRANSITIONS[self.status]:
            raise InvalidReservationError(
                f"Cannot move reservation {self.confirmation_number} "
                f"from {self.status.value} to {status.value}"
            )
        self.status = status


class ParkingSession(Entity):
    id: int
    ticket_number: str
    vehicle: Vehicle
    spot_id: str
    reservation_id: int | None = None
    entry_time: datetime
    exit_time: datetime | None = None

    @field_validator("entry_time")
    @classmethod
    def validate_entry_time(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("exit_time")
    @classmethod
    def validate_exit_time(cls, v: datetime | None) -> datetime | None:
        return _utc_or_none(v)

    def duration_hours(self) -> float:
        if self.exit_time is None:
            return 0.0
        return (self.exit_time - self.entry_time).total_seconds() / 3600


class Subscription(Entity):
    id: str
    vehicle: Vehicle
    plan: SubscriptionPlan
    spot_category: SpotCategory
    start_date: datetime
    end_date: datetime
    fee: float
    active: bool = True

    @field_validator("spot_category", mode="before")
    @classmethod
    def validate_spot_category(cls, v):
        return parse_spot_category(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v: datetime) -> datetime:
        return as_utc(v)

    def is_active(self, now: datetime) -> bool:
        now = as_utc(now)
        return self.active and self.start_date <= now < self.end_date


class PaymentRecord(Entity):
    id: int
    receipt_number: str
    license_plate: str
    amount: float = Field(ge=0)
    session_id: int | None = None
    method: PaymentMethod | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime
    paid_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("paid_at")
    @classmethod
    def validate_paid_at(cls, v: datetime | None) -> datetime | None:
        return _utc_or_none(v)
