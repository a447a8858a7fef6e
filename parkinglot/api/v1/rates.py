from fastapi import APIRouter, Query

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.payment import FeeQuoteResponse, MultiplierUpdate, RateTable, RateUpdate
from parkinglot.services import payment as payment_service
from parkinglot.utils.constants import SpotCategory, VehicleCategory

router = APIRouter(prefix="/rates", tags=["Rates"])


@router.get("", response_model=RateTable)
async def get_rates(lot: Lot):
    return payment_service.get_rate_table(lot)


@router.get("/quote", response_model=FeeQuoteResponse)
async def quote_fee(
    lot: Lot,
    vehicle_type: VehicleCategory,
    spot_type: SpotCategory,
    hours: float = Query(ge=0),
):
    return payment_service.quote_fee(lot, vehicle_type, spot_type, hours)


@router.put("/base", response_model=RateTable)
async def set_base_rate(lot: Lot, data: RateUpdate):
    return payment_service.set_base_rate(lot, data.vehicle_type, data.rate)


@router.put("/multipliers", response_model=RateTable)
async def set_spot_multiplier(lot: Lot, data: MultiplierUpdate):
    return payment_service.set_spot_multiplier(lot, data.spot_type, data.multiplier)
