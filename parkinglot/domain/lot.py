import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from parkinglot.config import settings
from parkinglot.domain.entities import (
    ParkingSession,
    PaymentRecord,
    Reservation,
    Spot,
    Subscription,
)
from parkinglot.domain.ledger import ReservationLedger
from parkinglot.domain.payments import PaymentLedger
from parkinglot.domain.pricing import FeeCalculator, PricingManager
from parkinglot.domain.registry import SpotRegistry
from parkinglot.domain.sessions import SessionTracker
from parkinglot.domain.subscriptions import SubscriptionBook
from parkinglot.schemas.common import BaseSchema
from parkinglot.schemas.payment import RateTable
from parkinglot.utils.timeutils import as_utc, utc_now


class LotState(BaseSchema):
    """Everything needed to rebuild a lot, as one serializable document."""

    name: str
    spots: list[Spot]
    reservations: list[Reservation] = []
    sessions: list[ParkingSession] = []
    open_session_ids: list[int] = []
    subscriptions: list[Subscription] = []
    payments: list[PaymentRecord] = []
    rates: RateTable | None = None
    next_reservation_id: int = 1
    next_session_id: int = 1
    next_payment_id: int = 1


class ParkingLot:
    """The context object every lot operation runs against.

    Each registry exclusively owns its entities; ``lock`` serializes the
    check-then-act sequences that span them. ``clock`` is the single source
    of "now" for windows, sessions and pricing.
    """

    def __init__(
        self,
        name: str,
        spots: SpotRegistry,
        reservations: ReservationLedger | None = None,
        sessions: SessionTracker | None = None,
        subscriptions: SubscriptionBook | None = None,
        payments: PaymentLedger | None = None,
        pricing: PricingManager | None = None,
        fee_calculator: FeeCalculator | None = None,
        clock: Callable[[], datetime] = utc_now,
        grace_period: timedelta | None = None,
    ):
        self.name = name
        self.spots = spots
        self.reservations = reservations if reservations is not None else ReservationLedger()
        self.sessions = sessions if sessions is not None else SessionTracker()
        self.subscriptions = subscriptions if subscriptions is not None else SubscriptionBook()
        self.payments = payments if payments is not None else PaymentLedger()
        self.clock = clock
        self.pricing = pricing if pricing is not None else PricingManager(clock=self.now)
        self.fee_calculator = fee_calculator if fee_calculator is not None else self.pricing
        if grace_period is None:
            grace_period = timedelta(minutes=settings.reservation_grace_minutes)
        self.grace_period = grace_period
        self.lock = threading.RLock()

    @classmethod
    def create(cls, name: str, total_spots: int, **kwargs) -> "ParkingLot":
        return cls(name, SpotRegistry.build_default(total_spots), **kwargs)

    def now(self) -> datetime:
        return as_utc(self.clock())

    def has_active_subscription(self, license_plate: str) -> bool:
        return self.subscriptions.has_active_subscription(license_plate, self.now())

    def to_state(self) -> LotState:
        with self.lock:
            state = LotState(
                name=self.name,
                spots=self.spots.all(),
                reservations=self.reservations.all(),
                sessions=self.sessions.history(),
                open_session_ids=self.sessions.open_session_ids(),
                subscriptions=self.subscriptions.all(),
                payments=self.payments.all(),
                rates=self.pricing.rate_table(),
                next_reservation_id=self.reservations.next_id,
                next_session_id=self.sessions.next_id,
                next_payment_id=self.payments.next_id,
            )
            return state.model_copy(deep=True)

    @classmethod
    def from_state(cls, state: LotState, **kwargs) -> "ParkingLot":
        """Rebuild a lot. A ``pricing`` passed in wins over the stored rates."""
        lot = cls(
            state.name,
            SpotRegistry(state.spots),
            reservations=ReservationLedger(state.reservations, state.next_reservation_id),
            sessions=SessionTracker(
                state.sessions, state.open_session_ids, state.next_session_id
            ),
            subscriptions=SubscriptionBook(state.subscriptions),
            payments=PaymentLedger(state.payments, state.next_payment_id),
            **kwargs,
        )
        if state.rates is not None and "pricing" not in kwargs:
            lot.pricing.apply_rates(state.rates)
        return lot
