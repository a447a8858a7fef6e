from parkinglot.core.exceptions import (
    AlreadyParkedError,
    InvalidReservationError,
    NoAvailableSpotError,
)
from parkinglot.domain.entities import Reservation, Spot, Vehicle
from parkinglot.domain.lot import ParkingLot
from parkinglot.schemas.parking import AvailabilityResponse, CategoryAvailability, SpotResponse
from parkinglot.schemas.session import CheckInResponse, SessionResponse
from parkinglot.utils.constants import ReservationStatus, SpotCategory, SpotState
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


def check_in(lot: ParkingLot, vehicle: Vehicle) -> Spot:
    """Park a walk-in vehicle in the first free spot that fits it."""
    with lot.lock:
        now = lot.now()
        if lot.sessions.is_parked(vehicle.license_plate):
            logger.warning(f"Check-in rejected: vehicle {vehicle.license_plate} is already parked")
            raise AlreadyParkedError(f"Vehicle {vehicle.license_plate} is already parked")

        spot = lot.spots.find_free_spot(vehicle.category, lot.reservations, now)
        if spot is None:
            logger.warning(
                f"Check-in rejected: no available spot for {vehicle.category.value} "
                f"{vehicle.license_plate}"
            )
            raise NoAvailableSpotError(
                f"No available spot for vehicle type: {vehicle.category.value}"
            )

        if spot.reservation_id is not None:
            # whatever is still attached is stale, see find_free_spot
            lot.spots.cancel_reservation(spot)
        lot.spots.occupy(spot, vehicle)
        session = lot.sessions.open(vehicle, spot, now)
        logger.info(
            f"Check-in for vehicle: {vehicle.license_plate} at spot: {spot.id} "
            f"(ticket {session.ticket_number})"
        )
        return spot


def check_in_with_reservation(
    lot: ParkingLot, vehicle: Vehicle, reservation: Reservation
) -> Spot:
    """Park a vehicle in the spot held by its reservation.

    The reservation must be active right now and belong to the vehicle's plate.
    """
    with lot.lock:
        now = lot.now()
        if lot.sessions.is_parked(vehicle.license_plate):
            logger.warning(f"Check-in rejected: vehicle {vehicle.license_plate} is already parked")
            raise AlreadyParkedError(f"Vehicle {vehicle.license_plate} is already parked")
        if (
            reservation.status != ReservationStatus.PENDING
            or not reservation.is_active(now)
            or not reservation.belongs_to(vehicle.license_plate)
        ):
            logger.warning(
                f"Check-in rejected: reservation {reservation.confirmation_number} is not "
                f"valid for {vehicle.license_plate}"
            )
            raise InvalidReservationError("Invalid or inactive reservation")

        spot = lot.spots.get(reservation.spot_id)
        if spot.vehicle_plate is not None and spot.vehicle_plate != vehicle.license_plate:
            logger.warning(
                f"Check-in rejected: reserved spot {spot.id} is occupied by {spot.vehicle_plate}"
            )
            raise NoAvailableSpotError(f"Reserved spot {spot.id} is occupied")

        lot.spots.occupy(spot, vehicle)
        lot.reservations.check_in(reservation)
        lot.spots.refresh_hold(spot, lot.reservations, now)
        session = lot.sessions.open(vehicle, spot, now, reservation_id=reservation.id)
        logger.info(
            f"Check-in with reservation {reservation.confirmation_number} for vehicle: "
            f"{vehicle.license_plate} at spot: {spot.id} (ticket {session.ticket_number})"
        )
        return spot


def check_in_response(lot: ParkingLot, spot: Spot) -> CheckInResponse:
    session = lot.sessions.get_open(spot.vehicle_plate)
    return CheckInResponse(
        session=SessionResponse.model_validate(session),
        ticket_number=session.ticket_number,
        spot=SpotResponse.model_validate(spot),
    )


def release_expired_reservations(lot: ParkingLot) -> list[Spot]:
    with lot.lock:
        released = lot.spots.release_stale_reservations(lot.reservations, lot.now())
        for spot in released:
            logger.info(f"Released stale reservation hold on spot: {spot.id}")
        return released


def list_spots(
    lot: ParkingLot,
    category: SpotCategory | None = None,
    state: SpotState | None = None,
) -> list[Spot]:
    with lot.lock:
        release_expired_reservations(lot)
        spots = lot.spots.by_category(category) if category else lot.spots.all()
        if state:
            spots = [spot for spot in spots if spot.state == state]
        return spots


def get_spot(lot: ParkingLot, spot_id: str) -> Spot:
    return lot.spots.get(spot_id.strip().upper())


def get_availability(lot: ParkingLot) -> AvailabilityResponse:
    with lot.lock:
        release_expired_reservations(lot)
        categories = []
        for category in SpotCategory:
            spots = lot.spots.by_category(category)
            if not spots:
                continue
            categories.append(
                CategoryAvailability(
                    category=category,
                    total=len(spots),
                    available=sum(1 for s in spots if s.is_available()),
                    occupied=sum(1 for s in spots if s.state == SpotState.OCCUPIED),
                    reserved=sum(1 for s in spots if s.state == SpotState.RESERVED),
                )
            )
        return AvailabilityResponse(
            lot_name=lot.name,
            categories=categories,
            total_spots=len(lot.spots),
            total_available=sum(c.available for c in categories),
        )
