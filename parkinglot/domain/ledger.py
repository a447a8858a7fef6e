import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from parkinglot.core.exceptions import InvalidWindowError, NotFoundError
from parkinglot.domain.entities import Reservation, Spot, Vehicle
from parkinglot.utils.constants import ACTIVE_RESERVATION_STATUSES, ReservationStatus
from parkinglot.utils.timeutils import as_utc

if TYPE_CHECKING:
    from parkinglot.domain.registry import SpotRegistry


def generate_confirmation_number() -> str:
    return f"RSV-{uuid.uuid4().hex[:8].upper()}"


class ReservationLedger:
    """Owns every reservation ever made for the lot.

    Reservations are never removed; cancelling or completing one only moves
    its status forward, so the ledger doubles as an audit trail.
    """

    def __init__(self, reservations: Iterable[Reservation] = (), next_id: int | None = None):
        self._reservations: dict[int, Reservation] = {r.id: r for r in reservations}
        self._next_id = next_id or max(self._reservations, default=0) + 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._reservations)

    def create(
        self,
        spot: Spot,
        vehicle: Vehicle,
        start: datetime,
        end: datetime,
        now: datetime | None = None,
    ) -> Reservation:
        start, end = as_utc(start), as_utc(end)
        if start >= end:
            raise InvalidWindowError()
        reservation = Reservation(
            id=self._next_id,
            confirmation_number=generate_confirmation_number(),
            spot_id=spot.id,
            vehicle=vehicle,
            start_time=start,
            end_time=end,
            status=ReservationStatus.PENDING,
            created_at=now,
        )
        self._reservations[reservation.id] = reservation
        self._next_id += 1
        return reservation

    def get(self, reservation_id: int) -> Reservation:
        reservation = self._reservations.get(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    def get_by_confirmation(self, confirmation_number: str) -> Reservation:
        for reservation in self._reservations.values():
            if reservation.confirmation_number == confirmation_number:
                return reservation
        raise NotFoundError("Reservation not found")

    def all(self) -> list[Reservation]:
        return list(self._reservations.values())

    def for_plate(self, license_plate: str) -> list[Reservation]:
        return [r for r in self._reservations.values() if r.belongs_to(license_plate)]

    def live_for_spot(self, spot_id: str, now: datetime | None = None) -> list[Reservation]:
        """Holds on ``spot_id`` that are active or still upcoming, earliest first.

        Without ``now`` every pending or checked-in reservation counts.
        """
        holds = [
            r
            for r in self._reservations.values()
            if r.spot_id == spot_id
            and (r.is_live(now) if now is not None else r.status in ACTIVE_RESERVATION_STATUSES)
        ]
        return sorted(holds, key=lambda r: r.start_time)

    def conflicts_with(
        self,
        vehicle: Vehicle,
        start: datetime,
        end: datetime,
        now: datetime,
        parked: bool = False,
    ) -> bool:
        """True if the vehicle already holds an overlapping live reservation,
        or is currently parked."""
        for reservation in self.for_plate(vehicle.license_plate):
            if reservation.is_live(now) and reservation.overlaps(start, end):
                return True
        return parked

    def find_active_pending_by_plate(self, license_plate: str, now: datetime) -> Reservation | None:
        for reservation in self.for_plate(license_plate):
            if reservation.status == ReservationStatus.PENDING and reservation.is_active(now):
                return reservation
        return None

    def find_pending_by_plate(self, license_plate: str, now: datetime) -> Reservation | None:
        """First pending reservation for the plate that has not ended yet,
        preferring one whose window is open right now."""
        active = self.find_active_pending_by_plate(license_plate, now)
        if active is not None:
            return active
        upcoming = [
            r
            for r in self.for_plate(license_plate)
            if r.status == ReservationStatus.PENDING and r.is_live(now)
        ]
        return min(upcoming, key=lambda r: r.start_time, default=None)

    def cancel_by_plate(self, license_plate: str, now: datetime, spots: "SpotRegistry") -> bool:
        reservation = self.find_pending_by_plate(license_plate, now)
        if reservation is None:
            return False
        self.cancel(reservation, now, spots)
        return True

    def cancel(self, reservation: Reservation, now: datetime, spots: "SpotRegistry") -> None:
        reservation.transition_to(ReservationStatus.CANCELLED)
        reservation.cancelled_at = now
        spot = spots.get(reservation.spot_id)
        if spot.reservation_id == reservation.id:
            spots.refresh_hold(spot, self, now)

    def check_in(self, reservation: Reservation) -> None:
        reservation.transition_to(ReservationStatus.CHECKED_IN)

    def complete(self, reservation: Reservation) -> None:
        reservation.transition_to(ReservationStatus.COMPLETED)

    def list_active(self, now: datetime) -> list[Reservation]:
        return [r for r in self._reservations.values() if r.is_active(now)]
