from fastapi import APIRouter

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionCreateResponse,
    SubscriptionQuote,
    SubscriptionRenew,
    SubscriptionResponse,
    SubscriptionStatus,
)
from parkinglot.schemas.vehicle import VehicleIn
from parkinglot.services import payment as payment_service
from parkinglot.services import subscription as subscription_service
from parkinglot.utils.constants import SpotCategory, SubscriptionPlan

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("", response_model=SubscriptionCreateResponse)
async def create_subscription(lot: Lot, data: SubscriptionCreate):
    processor = payment_service.build_processor(data.payment_method, data.card, data.upi)
    return subscription_service.register(
        lot, data.vehicle.to_vehicle(), data.plan, data.spot_type, processor
    )


@router.post("/quote", response_model=SubscriptionQuote)
async def quote_subscription(
    lot: Lot, vehicle: VehicleIn, plan: SubscriptionPlan, spot_type: SpotCategory
):
    fee = subscription_service.quote_subscription(lot, vehicle.to_vehicle(), plan, spot_type)
    return SubscriptionQuote(plan=plan, spot_type=spot_type, fee=fee)


@router.get("", response_model=list[SubscriptionResponse])
async def list_active_subscriptions(lot: Lot):
    return subscription_service.list_active(lot)


@router.get("/{license_plate}", response_model=SubscriptionStatus)
async def get_subscription_status(lot: Lot, license_plate: str):
    return subscription_service.get_status(lot, license_plate)


@router.post("/{license_plate}/renew", response_model=SubscriptionResponse)
async def renew_subscription(lot: Lot, license_plate: str, data: SubscriptionRenew):
    return subscription_service.renew(lot, license_plate, data.months)


@router.post("/{license_plate}/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(lot: Lot, license_plate: str):
    return subscription_service.cancel(lot, license_plate)
