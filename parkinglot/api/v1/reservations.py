from datetime import datetime

from fastapi import APIRouter, Query

from parkinglot.core.dependencies import Lot
from parkinglot.domain.entities import Vehicle
from parkinglot.schemas.reservation import (
    ReservationCancelResponse,
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
)
from parkinglot.schemas.session import CheckInResponse, ReservedCheckInRequest
from parkinglot.services import parking as parking_service
from parkinglot.services import reservation as reservation_service
from parkinglot.utils.constants import MAX_LICENSE_PLATE_LENGTH, VehicleCategory

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("", response_model=ReservationResponse)
async def create_reservation(lot: Lot, data: ReservationCreate):
    return reservation_service.make_reservation(
        lot, data.vehicle.to_vehicle(), data.start_time, data.end_time
    )


@router.get("", response_model=ReservationListResponse)
async def list_reservations(lot: Lot, license_plate: str | None = Query(None)):
    if license_plate:
        reservations = reservation_service.list_reservations_for_plate(lot, license_plate)
    else:
        reservations = reservation_service.list_active_reservations(lot)
    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=len(reservations),
    )


@router.get("/conflicts")
async def check_conflict(
    lot: Lot,
    vehicle_type: VehicleCategory,
    start_time: datetime,
    end_time: datetime,
    license_plate: str = Query(min_length=1, max_length=MAX_LICENSE_PLATE_LENGTH),
):
    vehicle = Vehicle(license_plate=license_plate, category=vehicle_type)
    return {
        "license_plate": vehicle.license_plate,
        "conflict": reservation_service.has_conflict(lot, vehicle, start_time, end_time),
    }


@router.get("/confirm/{confirmation_number}", response_model=ReservationResponse)
async def get_reservation_by_confirmation(lot: Lot, confirmation_number: str):
    return reservation_service.get_by_confirmation(lot, confirmation_number)


@router.post("/check-in", response_model=CheckInResponse)
async def check_in_with_reservation(lot: Lot, data: ReservedCheckInRequest):
    spot = reservation_service.use_reservation(lot, data.license_plate)
    return parking_service.check_in_response(lot, spot)


@router.post("/{license_plate}/cancel", response_model=ReservationCancelResponse)
async def cancel_reservation(lot: Lot, license_plate: str):
    cancelled = reservation_service.cancel_reservation(lot, license_plate)
    return ReservationCancelResponse(
        license_plate=license_plate.strip().upper(), cancelled=cancelled
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(lot: Lot, reservation_id: int):
    return reservation_service.get_reservation(lot, reservation_id)
