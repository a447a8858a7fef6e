from fastapi import APIRouter, Query

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.parking import AvailabilityResponse, SpotListResponse, SpotResponse
from parkinglot.services import parking as parking_service
from parkinglot.utils.constants import SpotCategory, SpotState

router = APIRouter(prefix="/spots", tags=["Parking Spots"])


@router.get("", response_model=SpotListResponse)
async def list_spots(
    lot: Lot,
    category: SpotCategory | None = Query(None),
    state: SpotState | None = Query(None),
):
    spots = parking_service.list_spots(lot, category, state)
    return SpotListResponse(
        spots=[SpotResponse.model_validate(s) for s in spots],
        total=len(spots),
    )


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(lot: Lot):
    return parking_service.get_availability(lot)


@router.post("/release-expired", response_model=SpotListResponse)
async def release_expired_reservations(lot: Lot):
    """Free spots held by reservations that ended unused."""
    spots = parking_service.release_expired_reservations(lot)
    return SpotListResponse(
        spots=[SpotResponse.model_validate(s) for s in spots],
        total=len(spots),
    )


@router.get("/{spot_id}", response_model=SpotResponse)
async def get_spot(lot: Lot, spot_id: str):
    return parking_service.get_spot(lot, spot_id)
