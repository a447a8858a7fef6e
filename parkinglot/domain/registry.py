from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import TYPE_CHECKING

from parkinglot.core.exceptions import NotFoundError, ValidationError
from parkinglot.domain.entities import (
    Spot,
    Vehicle,
    parse_spot_category,
    parse_vehicle_category,
)
from parkinglot.utils.constants import (
    SPOT_ID_PREFIXES,
    ReservationStatus,
    SpotCategory,
    SpotState,
    VehicleCategory,
)

if TYPE_CHECKING:
    from parkinglot.domain.entities import Reservation
    from parkinglot.domain.ledger import ReservationLedger


def default_layout(total_spots: int) -> dict[SpotCategory, int]:
    """Split a spot count across categories: half standard, a quarter compact,
    an eighth each oversized and charging, the rest accessible."""
    standard = total_spots // 2
    compact = total_spots // 4
    oversized = total_spots // 8
    charging = total_spots // 8
    return {
        SpotCategory.STANDARD: standard,
        SpotCategory.COMPACT: compact,
        SpotCategory.OVERSIZED: oversized,
        SpotCategory.CHARGING: charging,
        SpotCategory.ACCESSIBLE: total_spots - standard - compact - oversized - charging,
    }


class SpotRegistry:
    """Owns the fixed set of spots of one lot.

    Spots are scanned in insertion order, which groups them by category when
    built from a layout, so allocation is deterministic.
    """

    def __init__(self, spots: Iterable[Spot] = ()):
        self._spots: dict[str, Spot] = {}
        for spot in spots:
            self.add(spot)

    @classmethod
    def build(cls, layout: dict[SpotCategory | str, int]) -> "SpotRegistry":
        spots = []
        for category, count in layout.items():
            category = parse_spot_category(category)
            if count < 0:
                raise ValidationError(f"Spot count for {category.value} cannot be negative")
            prefix = SPOT_ID_PREFIXES[category]
            spots.extend(Spot(id=f"{prefix}{i}", category=category) for i in range(1, count + 1))
        return cls(spots)

    @classmethod
    def build_default(cls, total_spots: int) -> "SpotRegistry":
        if total_spots < 1:
            raise ValidationError("A parking lot needs at least one spot")
        return cls.build(default_layout(total_spots))

    def __iter__(self) -> Iterator[Spot]:
        return iter(self._spots.values())

    def __len__(self) -> int:
        return len(self._spots)

    def add(self, spot: Spot) -> None:
        if spot.id in self._spots:
            raise ValidationError(f"Duplicate spot id: {spot.id}")
        self._spots[spot.id] = spot

    def get(self, spot_id: str) -> Spot:
        spot = self._spots.get(spot_id)
        if spot is None:
            raise NotFoundError(f"Parking spot {spot_id} not found")
        return spot

    def all(self) -> list[Spot]:
        return list(self._spots.values())

    def by_category(self, category: SpotCategory | str) -> list[Spot]:
        category = parse_spot_category(category)
        return [spot for spot in self._spots.values() if spot.category == category]

    def count_available(self, category: SpotCategory | str) -> int:
        return sum(1 for spot in self.by_category(category) if spot.is_available())

    def find_free_spot(
        self,
        vehicle_category: VehicleCategory | str,
        reservations: "ReservationLedger | None" = None,
        now: datetime | None = None,
    ) -> Spot | None:
        """First available spot that fits the vehicle.

        With ``reservations`` and ``now`` given, a spot still holding a stale
        reservation (cancelled, completed or ended unused) also counts as free.
        """
        vehicle_category = parse_vehicle_category(vehicle_category)
        for spot in self._spots.values():
            if spot.can_fit(vehicle_category) and self._is_free(spot, reservations, now):
                return spot
        return None

    def find_free_spot_for_window(
        self,
        vehicle_category: VehicleCategory | str,
        start: datetime,
        end: datetime,
        reservations: "ReservationLedger",
        now: datetime | None = None,
    ) -> Spot | None:
        """First fitting spot none of whose holds overlaps ``[start, end)``.

        Every hold the ledger has on a spot is checked, not only the one
        attached to it. A spot taken by a walk-in with no hold is skipped.
        """
        vehicle_category = parse_vehicle_category(vehicle_category)
        for spot in self._spots.values():
            if not spot.can_fit(vehicle_category):
                continue
            holds = reservations.live_for_spot(spot.id, now)
            if any(hold.overlaps(start, end) for hold in holds):
                continue
            if not holds and spot.vehicle_plate is not None:
                continue
            return spot
        return None

    def occupy(self, spot: Spot, vehicle: Vehicle) -> None:
        spot.state = SpotState.OCCUPIED
        spot.vehicle_plate = vehicle.license_plate

    def release(self, spot: Spot, reservations: "ReservationLedger", now: datetime) -> None:
        spot.vehicle_plate = None
        self.refresh_hold(spot, reservations, now)

    def reserve(
        self,
        spot: Spot,
        reservation: "Reservation",
        reservations: "ReservationLedger | None" = None,
        now: datetime | None = None,
    ) -> None:
        """Attach a hold to the spot.

        With the ledger given, the spot keeps pointing at its earliest live
        hold, which may be an older reservation than ``reservation``.
        """
        if reservations is not None:
            self.refresh_hold(spot, reservations, now)
            return
        spot.reservation_id = reservation.id
        if spot.state != SpotState.OCCUPIED:
            spot.state = SpotState.RESERVED

    def refresh_hold(
        self, spot: Spot, reservations: "ReservationLedger", now: datetime | None
    ) -> None:
        """Point the spot at its next live hold, or detach it when none is left.

        A checked-in hold wins over pending ones.
        """
        hold = self._next_hold(spot, reservations, now)
        if hold is None:
            self.cancel_reservation(spot)
            return
        spot.reservation_id = hold.id
        if spot.vehicle_plate is None:
            if hold.status == ReservationStatus.CHECKED_IN:
                spot.state = SpotState.FREE
            else:
                spot.state = SpotState.RESERVED

    def cancel_reservation(self, spot: Spot) -> None:
        spot.reservation_id = None
        if spot.vehicle_plate is None:
            spot.state = SpotState.FREE

    def release_stale_reservations(
        self, reservations: "ReservationLedger", now: datetime
    ) -> list[Spot]:
        """Drop holds that ended unused or are no longer active.

        A spot with a later hold still pending moves on to that hold.
        """
        released = []
        for spot in self._spots.values():
            current = self._attached(spot, reservations)
            if current is not None and self._is_stale(current, now):
                self.refresh_hold(spot, reservations, now)
                released.append(spot)
        return released

    def _is_free(
        self,
        spot: Spot,
        reservations: "ReservationLedger | None",
        now: datetime | None,
    ) -> bool:
        if spot.is_available():
            return True
        if reservations is None or now is None or spot.vehicle_plate is not None:
            return False
        return self._next_hold(spot, reservations, now) is None

    @staticmethod
    def _next_hold(
        spot: Spot, reservations: "ReservationLedger", now: datetime | None
    ) -> "Reservation | None":
        holds = reservations.live_for_spot(spot.id, now)
        for hold in holds:
            if hold.status == ReservationStatus.CHECKED_IN:
                return hold
        return holds[0] if holds else None

    @staticmethod
    def _is_stale(reservation: "Reservation", now: datetime) -> bool:
        return reservation.has_expired(now) or reservation.status in (
            ReservationStatus.CANCELLED,
            ReservationStatus.COMPLETED,
        )

    @staticmethod
    def _attached(spot: Spot, reservations: "ReservationLedger") -> "Reservation | None":
        if spot.reservation_id is None:
            return None
        return reservations.get(spot.reservation_id)
