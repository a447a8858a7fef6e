import uuid
from collections.abc import Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING

from parkinglot.core.exceptions import AlreadyParkedError, VehicleNotFoundError
from parkinglot.domain.entities import ParkingSession, Spot, Vehicle, plate_key
from parkinglot.utils.constants import ReservationStatus

if TYPE_CHECKING:
    from parkinglot.domain.ledger import ReservationLedger
    from parkinglot.domain.registry import SpotRegistry


def generate_ticket_number() -> str:
    return f"TKT-{uuid.uuid4().hex[:12].upper()}"


class SessionTracker:
    """Tracks parked vehicles by plate and keeps the entry/exit history.

    A session stays in the open index from check-in until a successful
    payment finalizes it; the history keeps every session for security logs.
    """

    def __init__(
        self,
        sessions: Iterable[ParkingSession] = (),
        open_session_ids: Iterable[int] = (),
        next_id: int | None = None,
    ):
        self._history: dict[int, ParkingSession] = {s.id: s for s in sessions}
        self._open: dict[str, ParkingSession] = {}
        for session_id in open_session_ids:
            session = self._history[session_id]
            self._open[session.vehicle.license_plate] = session
        self._next_id = next_id or max(self._history, default=0) + 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def open(
        self,
        vehicle: Vehicle,
        spot: Spot,
        now: datetime,
        reservation_id: int | None = None,
    ) -> ParkingSession:
        if vehicle.license_plate in self._open:
            raise AlreadyParkedError(f"Vehicle {vehicle.license_plate} is already parked")
        session = ParkingSession(
            id=self._next_id,
            ticket_number=generate_ticket_number(),
            vehicle=vehicle,
            spot_id=spot.id,
            reservation_id=reservation_id,
            entry_time=now,
        )
        self._history[session.id] = session
        self._open[vehicle.license_plate] = session
        self._next_id += 1
        return session

    def is_parked(self, license_plate: str) -> bool:
        return plate_key(license_plate) in self._open

    def get_open(self, license_plate: str) -> ParkingSession:
        plate = plate_key(license_plate)
        session = self._open.get(plate)
        if session is None:
            raise VehicleNotFoundError(f"Vehicle with license plate {plate} not found")
        return session

    def list_open(self) -> list[ParkingSession]:
        return list(self._open.values())

    def open_session_ids(self) -> list[int]:
        return [session.id for session in self._open.values()]

    def prepare_checkout(self, license_plate: str, now: datetime) -> ParkingSession:
        session = self.get_open(license_plate)
        session.exit_time = now
        return session

    @staticmethod
    def duration(session: ParkingSession) -> float:
        return session.duration_hours()

    def finalize(
        self,
        license_plate: str,
        success: bool,
        spots: "SpotRegistry",
        reservations: "ReservationLedger",
        now: datetime,
    ) -> ParkingSession:
        session = self.get_open(license_plate)
        if not success:
            return session

        if session.exit_time is None:
            session.exit_time = now
        if session.reservation_id is not None:
            reservation = reservations.get(session.reservation_id)
            if reservation.status == ReservationStatus.CHECKED_IN:
                reservations.complete(reservation)
        spots.release(spots.get(session.spot_id), reservations, now)
        del self._open[session.vehicle.license_plate]
        return session

    def history(self) -> list[ParkingSession]:
        return list(self._history.values())

    def security_log(self, license_plate: str | None = None) -> dict[str, list[ParkingSession]]:
        logs: dict[str, list[ParkingSession]] = {}
        plate = plate_key(license_plate) if license_plate else None
        for session in self._history.values():
            if plate and session.vehicle.license_plate != plate:
                continue
            logs.setdefault(session.vehicle.license_plate, []).append(session)
        return logs

    def security_log_by_date(self, day: date) -> list[ParkingSession]:
        return [s for s in self._history.values() if s.entry_time.date() == day]
