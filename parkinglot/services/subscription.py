from parkinglot.core.exceptions import PaymentError
from parkinglot.domain.entities import Subscription, Vehicle, parse_spot_category
from parkinglot.domain.lot import ParkingLot
from parkinglot.domain.payments import PaymentProcessor
from parkinglot.domain.subscriptions import SubscriptionBook
from parkinglot.schemas.payment import PaymentResponse
from parkinglot.schemas.subscription import (
    SubscriptionCreateResponse,
    SubscriptionResponse,
    SubscriptionStatus,
)
from parkinglot.utils.constants import SpotCategory, SubscriptionPlan
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


def quote_subscription(
    lot: ParkingLot,
    vehicle: Vehicle,
    plan: SubscriptionPlan,
    spot_type: SpotCategory | str,
) -> float:
    return SubscriptionBook.calculate_fee(lot.pricing, vehicle, plan, parse_spot_category(spot_type))


def register(
    lot: ParkingLot,
    vehicle: Vehicle,
    plan: SubscriptionPlan,
    spot_type: SpotCategory | str,
    processor: PaymentProcessor,
) -> SubscriptionCreateResponse:
    """Charge the plan fee and start a subscription from now.

    A declined payment is recorded as failed and no subscription is created.
    """
    spot_type = parse_spot_category(spot_type)
    with lot.lock:
        now = lot.now()
        fee = SubscriptionBook.calculate_fee(lot.pricing, vehicle, plan, spot_type)
        payment = lot.payments.record(vehicle.license_plate, fee, now, method=processor.method)
        success = processor.process(fee)
        lot.payments.settle(payment, success, now)
        if not success:
            logger.warning(
                f"Subscription payment declined for vehicle: {vehicle.license_plate}"
            )
            raise PaymentError("Payment failed. Subscription not created.")

        subscription = lot.subscriptions.create(vehicle, plan, spot_type, fee, now)
        logger.info(
            f"Subscription {plan.value} created for vehicle: {vehicle.license_plate} "
            f"until {subscription.end_date.date().isoformat()}, paid {fee:.2f}"
        )
        return SubscriptionCreateResponse(
            subscription=SubscriptionResponse.model_validate(subscription),
            payment=PaymentResponse.model_validate(payment),
        )


def renew(lot: ParkingLot, license_plate: str, months: int) -> Subscription:
    with lot.lock:
        subscription = lot.subscriptions.renew(license_plate, months, lot.now())
        logger.info(
            f"Subscription renewed for vehicle: {subscription.vehicle.license_plate} "
            f"until {subscription.end_date.date().isoformat()}"
        )
        return subscription


def cancel(lot: ParkingLot, license_plate: str) -> Subscription:
    with lot.lock:
        subscription = lot.subscriptions.cancel(license_plate)
        logger.info(f"Subscription cancelled for vehicle: {subscription.vehicle.license_plate}")
        return subscription


def get_status(lot: ParkingLot, license_plate: str) -> SubscriptionStatus:
    with lot.lock:
        subscription = lot.subscriptions.get(license_plate)
        is_active = subscription is not None and subscription.is_active(lot.now())
    return SubscriptionStatus(
        license_plate=license_plate.strip().upper(),
        is_active=is_active,
        subscription=SubscriptionResponse.model_validate(subscription) if subscription else None,
    )


def list_active(lot: ParkingLot) -> list[Subscription]:
    with lot.lock:
        return lot.subscriptions.list_active(lot.now())
