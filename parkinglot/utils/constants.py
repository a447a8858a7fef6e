from enum import Enum


class SpotCategory(str, Enum):
    STANDARD = "standard"
    COMPACT = "compact"
    OVERSIZED = "oversized"
    CHARGING = "charging"
    ACCESSIBLE = "accessible"


class VehicleCategory(str, Enum):
    CAR = "car"
    BIKE = "bike"
    TRUCK = "truck"
    BUS = "bus"


class SpotState(str, Enum):
    FREE = "free"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SubscriptionPlan(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"


class PaymentMethod(str, Enum):
    CARD = "card"
    UPI = "upi"
    SUBSCRIPTION = "subscription"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# Spot category -> vehicle categories it accepts
SPOT_COMPATIBILITY: dict[SpotCategory, frozenset[VehicleCategory]] = {
    SpotCategory.STANDARD: frozenset({VehicleCategory.CAR, VehicleCategory.BIKE}),
    SpotCategory.COMPACT: frozenset({VehicleCategory.BIKE}),
    SpotCategory.OVERSIZED: frozenset(VehicleCategory),
    SpotCategory.CHARGING: frozenset({VehicleCategory.CAR}),
    SpotCategory.ACCESSIBLE: frozenset({VehicleCategory.CAR, VehicleCategory.BIKE}),
}

# Default layout order and spot id prefixes
SPOT_ID_PREFIXES: dict[SpotCategory, str] = {
    SpotCategory.STANDARD: "C",
    SpotCategory.COMPACT: "B",
    SpotCategory.OVERSIZED: "T",
    SpotCategory.CHARGING: "E",
    SpotCategory.ACCESSIBLE: "H",
}

ACTIVE_RESERVATION_STATUSES = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CHECKED_IN}
)

# Allowed reservation status transitions
RESERVATION_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.COMPLETED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

SUBSCRIPTION_PLAN_MONTHS: dict[SubscriptionPlan, int] = {
    SubscriptionPlan.MONTHLY: 1,
    SubscriptionPlan.QUARTERLY: 3,
    SubscriptionPlan.SEMI_ANNUAL: 6,
    SubscriptionPlan.ANNUAL: 12,
}

# Multi-month plans are discounted against the monthly fee
SUBSCRIPTION_PLAN_DISCOUNTS: dict[SubscriptionPlan, float] = {
    SubscriptionPlan.MONTHLY: 1.0,
    SubscriptionPlan.QUARTERLY: 0.9,
    SubscriptionPlan.SEMI_ANNUAL: 0.85,
    SubscriptionPlan.ANNUAL: 0.8,
}

MAX_LICENSE_PLATE_LENGTH = 20
