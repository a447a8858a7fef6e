import uuid
from collections.abc import Iterable
from datetime import datetime

from dateutil.relativedelta import relativedelta

from parkinglot.core.exceptions import NotFoundError, ValidationError
from parkinglot.domain.entities import Subscription, Vehicle, plate_key
from parkinglot.domain.pricing import PricingManager
from parkinglot.utils.constants import (
    SUBSCRIPTION_PLAN_DISCOUNTS,
    SUBSCRIPTION_PLAN_MONTHS,
    SpotCategory,
    SubscriptionPlan,
)


class SubscriptionBook:
    """Subscriptions keyed by plate; a newer subscription replaces an older one."""

    def __init__(self, subscriptions: Iterable[Subscription] = ()):
        self._subscriptions: dict[str, Subscription] = {
            s.vehicle.license_plate: s for s in subscriptions
        }

    def __len__(self) -> int:
        return len(self._subscriptions)

    @staticmethod
    def calculate_fee(
        pricing: PricingManager,
        vehicle: Vehicle,
        plan: SubscriptionPlan,
        spot_category: SpotCategory | str,
    ) -> float:
        monthly = pricing.monthly_subscription_fee(vehicle.category, spot_category)
        months = SUBSCRIPTION_PLAN_MONTHS[plan]
        return round(monthly * months * SUBSCRIPTION_PLAN_DISCOUNTS[plan], 2)

    def create(
        self,
        vehicle: Vehicle,
        plan: SubscriptionPlan,
        spot_category: SpotCategory | str,
        fee: float,
        now: datetime,
    ) -> Subscription:
        subscription = Subscription(
            id=uuid.uuid4().hex,
            vehicle=vehicle,
            plan=plan,
            spot_category=spot_category,
            start_date=now,
            end_date=now + relativedelta(months=SUBSCRIPTION_PLAN_MONTHS[plan]),
            fee=fee,
        )
        self._subscriptions[vehicle.license_plate] = subscription
        return subscription

    def get(self, license_plate: str) -> Subscription | None:
        return self._subscriptions.get(plate_key(license_plate))

    def require(self, license_plate: str) -> Subscription:
        subscription = self.get(license_plate)
        if subscription is None:
            raise NotFoundError(f"No subscription found for vehicle {license_plate.upper()}")
        return subscription

    def has_active_subscription(self, license_plate: str, now: datetime) -> bool:
        subscription = self.get(license_plate)
        return subscription is not None and subscription.is_active(now)

    def renew(self, license_plate: str, months: int, now: datetime) -> Subscription:
        if months < 1:
            raise ValidationError("Renewal must be for at least one month")
        subscription = self.require(license_plate)
        if not subscription.is_active(now):
            raise ValidationError("Only active subscriptions can be renewed")
        subscription.end_date = subscription.end_date + relativedelta(months=months)
        return subscription

    def cancel(self, license_plate: str) -> Subscription:
        subscription = self.require(license_plate)
        subscription.active = False
        return subscription

    def all(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    def list_active(self, now: datetime) -> list[Subscription]:
        return [s for s in self._subscriptions.values() if s.is_active(now)]
