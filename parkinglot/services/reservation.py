from datetime import datetime

from parkinglot.core.exceptions import (
    InvalidReservationError,
    InvalidWindowError,
    NoAvailableSpotError,
    ReservationConflictError,
)
from parkinglot.domain.entities import Reservation, Spot, Vehicle, plate_key
from parkinglot.domain.lot import ParkingLot
from parkinglot.services import parking as parking_service
from parkinglot.utils.logger import get_logger
from parkinglot.utils.timeutils import as_utc

logger = get_logger(__name__)


def make_reservation(
    lot: ParkingLot, vehicle: Vehicle, start: datetime, end: datetime
) -> Reservation:
    """Hold a fitting spot for ``vehicle`` over ``[start, end)``."""
    start, end = as_utc(start), as_utc(end)
    if start >= end:
        raise InvalidWindowError()

    with lot.lock:
        now = lot.now()
        if end <= now:
            raise InvalidWindowError("Reservation window has already ended")
        if lot.reservations.conflicts_with(
            vehicle, start, end, now, parked=lot.sessions.is_parked(vehicle.license_plate)
        ):
            logger.warning(f"Reservation rejected: conflict for vehicle {vehicle.license_plate}")
            raise ReservationConflictError(
                "This vehicle already has a reservation or is parked during this time"
            )

        spot = lot.spots.find_free_spot_for_window(
            vehicle.category, start, end, lot.reservations, now
        )
        if spot is None:
            logger.warning(
                f"Reservation rejected: no spot for {vehicle.category.value} "
                f"{vehicle.license_plate} between {start.isoformat()} and {end.isoformat()}"
            )
            raise NoAvailableSpotError("No available spot for reservation")

        reservation = lot.reservations.create(spot, vehicle, start, end, now)
        lot.spots.reserve(spot, reservation, lot.reservations, now)
        logger.info(
            f"Reservation {reservation.confirmation_number} made for vehicle: "
            f"{vehicle.license_plate} at spot: {spot.id}"
        )
        return reservation


def use_reservation(lot: ParkingLot, license_plate: str, vehicle: Vehicle | None = None) -> Spot:
    """Check a vehicle in against its pending reservation.

    Arrival is accepted within the lot's grace period around the reservation
    window; the check-in itself still needs the window to be open.
    """
    plate = plate_key(license_plate)
    with lot.lock:
        now = lot.now()
        reservation = lot.reservations.find_pending_by_plate(plate, now)
        if reservation is None:
            logger.warning(f"Reserved check-in rejected: no reservation for {plate}")
            raise InvalidReservationError(f"No active reservation found for vehicle {plate}")

        if not (
            reservation.start_time - lot.grace_period
            <= now
            <= reservation.end_time + lot.grace_period
        ):
            minutes = int(lot.grace_period.total_seconds() // 60)
            logger.warning(
                f"Reserved check-in rejected: {plate} arrived outside reservation "
                f"{reservation.confirmation_number}"
            )
            raise InvalidReservationError(
                f"You can only check in during your reservation period (±{minutes} minutes)"
            )

        return parking_service.check_in_with_reservation(
            lot, vehicle or reservation.vehicle, reservation
        )


def cancel_reservation(lot: ParkingLot, license_plate: str) -> bool:
    plate = plate_key(license_plate)
    with lot.lock:
        cancelled = lot.reservations.cancel_by_plate(plate, lot.now(), lot.spots)
        if cancelled:
            logger.info(f"Reservation cancelled for vehicle: {plate}")
        else:
            logger.warning(f"Cancellation rejected: no pending reservation for {plate}")
        return cancelled


def get_reservation(lot: ParkingLot, reservation_id: int) -> Reservation:
    return lot.reservations.get(reservation_id)


def get_by_confirmation(lot: ParkingLot, confirmation_number: str) -> Reservation:
    return lot.reservations.get_by_confirmation(confirmation_number.strip().upper())


def list_active_reservations(lot: ParkingLot) -> list[Reservation]:
    with lot.lock:
        return lot.reservations.list_active(lot.now())


def list_reservations_for_plate(lot: ParkingLot, license_plate: str) -> list[Reservation]:
    return lot.reservations.for_plate(plate_key(license_plate))


def has_conflict(lot: ParkingLot, vehicle: Vehicle, start: datetime, end: datetime) -> bool:
    with lot.lock:
        return lot.reservations.conflicts_with(
            vehicle,
            as_utc(start),
            as_utc(end),
            lot.now(),
            parked=lot.sessions.is_parked(vehicle.license_plate),
        )
