from datetime import timedelta

import pytest

from parkinglot.core.exceptions import InvalidCategoryError, NotFoundError, ValidationError
from parkinglot.domain.entities import Spot
from parkinglot.domain.ledger import ReservationLedger
from parkinglot.domain.registry import SpotRegistry, default_layout
from parkinglot.utils.constants import SpotCategory, SpotState, VehicleCategory


@pytest.mark.parametrize(
    ("spot_category", "accepted"),
    [
        (SpotCategory.STANDARD, {VehicleCategory.CAR, VehicleCategory.BIKE}),
        (SpotCategory.COMPACT, {VehicleCategory.BIKE}),
        (SpotCategory.OVERSIZED, set(VehicleCategory)),
        (SpotCategory.CHARGING, {VehicleCategory.CAR}),
        (SpotCategory.ACCESSIBLE, {VehicleCategory.CAR, VehicleCategory.BIKE}),
    ],
)
def test_can_fit_matches_compatibility_table(spot_category, accepted):
    spot = Spot(id="X1", category=spot_category)
    for vehicle_category in VehicleCategory:
        assert spot.can_fit(vehicle_category) == (vehicle_category in accepted)


def test_unknown_categories_are_rejected():
    spot = Spot(id="X1", category="standard")
    with pytest.raises(InvalidCategoryError):
        spot.can_fit("hovercraft")
    with pytest.raises(InvalidCategoryError):
        SpotRegistry.build({"rooftop": 2})


def test_default_layout_splits_by_category():
    assert default_layout(40) == {
        SpotCategory.STANDARD: 20,
        SpotCategory.COMPACT: 10,
        SpotCategory.OVERSIZED: 5,
        SpotCategory.CHARGING: 5,
        SpotCategory.ACCESSIBLE: 0,
    }
    layout = default_layout(10)
    assert sum(layout.values()) == 10
    assert layout[SpotCategory.ACCESSIBLE] == 1


def test_build_default_assigns_prefixed_ids():
    registry = SpotRegistry.build_default(10)
    ids = [spot.id for spot in registry]
    assert ids == ["C1", "C2", "C3", "C4", "C5", "B1", "B2", "T1", "E1", "H1"]
    assert len(registry.by_category("compact")) == 2


def test_build_default_needs_a_spot():
    with pytest.raises(ValidationError):
        SpotRegistry.build_default(0)


def test_duplicate_and_missing_spot_ids():
    registry = SpotRegistry([Spot(id="C1", category="standard")])
    with pytest.raises(ValidationError):
        registry.add(Spot(id="C1", category="compact"))
    with pytest.raises(NotFoundError):
        registry.get("Z9")


def test_is_available_requires_free_and_unreserved():
    spot = Spot(id="C1", category="standard")
    assert spot.is_available()
    spot.reservation_id = 3
    assert not spot.is_available()
    spot.reservation_id = None
    spot.state = SpotState.OCCUPIED
    assert not spot.is_available()


def test_find_free_spot_scans_in_order(make_vehicle):
    registry = SpotRegistry.build_default(10)
    assert registry.find_free_spot("bike").id == "C1"
    assert registry.find_free_spot("truck").id == "T1"
    assert registry.find_free_spot(VehicleCategory.BUS).id == "T1"

    registry.occupy(registry.get("C1"), make_vehicle("AAA1"))
    assert registry.find_free_spot("car").id == "C2"


def test_find_free_spot_returns_none_when_full(make_vehicle):
    registry = SpotRegistry.build({"compact": 1})
    assert registry.find_free_spot("car") is None
    registry.occupy(registry.get("B1"), make_vehicle("BK1", "bike"))
    assert registry.find_free_spot("bike") is None


def test_count_available_per_category(make_vehicle):
    registry = SpotRegistry.build_default(10)
    assert registry.count_available(SpotCategory.STANDARD) == 5
    assert registry.count_available("compact") == 2

    registry.occupy(registry.get("C1"), make_vehicle("AAA1"))
    assert registry.count_available("standard") == 4
    assert registry.count_available("oversized") == 1


def test_reserve_and_cancel_reservation(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    reservation = ledger.create(
        spot, make_vehicle("RES1"), clock.now, clock.now + timedelta(hours=1)
    )

    registry.reserve(spot, reservation)
    assert spot.state == SpotState.RESERVED
    assert spot.reservation_id == reservation.id
    assert registry.find_free_spot("car") is None

    registry.cancel_reservation(spot)
    assert spot.state == SpotState.FREE
    assert spot.reservation_id is None


def test_reserve_keeps_walk_in_occupancy(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    registry.occupy(spot, make_vehicle("WALK1"))
    reservation = ledger.create(
        spot, make_vehicle("RES1"), clock.now + timedelta(hours=3), clock.now + timedelta(hours=4)
    )

    registry.reserve(spot, reservation)
    assert spot.state == SpotState.OCCUPIED

    registry.cancel_reservation(spot)
    assert spot.state == SpotState.OCCUPIED
    assert spot.vehicle_plate == "WALK1"


def test_find_free_spot_for_window_skips_overlaps(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 2})
    ledger = ReservationLedger()
    start = clock.now + timedelta(hours=1)
    end = start + timedelta(hours=2)
    first = ledger.create(registry.get("C1"), make_vehicle("RES1"), start, end)
    registry.reserve(registry.get("C1"), first)

    assert registry.find_free_spot_for_window("car", start, end, ledger).id == "C2"
    # touching windows do not overlap
    assert registry.find_free_spot_for_window("car", end, end + timedelta(hours=1), ledger).id == "C1"


def test_find_free_spot_for_window_checks_every_hold(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    later = ledger.create(
        spot, make_vehicle("AAA1"), clock.now + timedelta(hours=4), clock.now + timedelta(hours=6)
    )
    registry.reserve(spot, later, ledger, clock.now)
    earlier = ledger.create(
        spot, make_vehicle("BBB2"), clock.now + timedelta(hours=1), clock.now + timedelta(hours=2)
    )
    registry.reserve(spot, earlier, ledger, clock.now)

    assert spot.reservation_id == earlier.id
    window = (clock.now + timedelta(hours=4), clock.now + timedelta(hours=6))
    assert registry.find_free_spot_for_window("car", *window, ledger, clock.now) is None
    assert (
        registry.find_free_spot_for_window(
            "car", clock.now + timedelta(hours=2), clock.now + timedelta(hours=3), ledger, clock.now
        ).id
        == "C1"
    )


def test_release_moves_to_next_hold(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    stale = ledger.create(
        spot, make_vehicle("OLD1"), clock.now - timedelta(hours=2), clock.now - timedelta(hours=1)
    )
    upcoming = ledger.create(
        spot, make_vehicle("NEW1"), clock.now + timedelta(hours=1), clock.now + timedelta(hours=2)
    )
    registry.reserve(spot, stale)
    registry.occupy(spot, make_vehicle("WALK1"))

    assert registry.find_free_spot("car", ledger, clock.now) is None
    registry.release(spot, ledger, clock.now)
    assert spot.reservation_id == upcoming.id
    assert spot.state == SpotState.RESERVED
    assert registry.find_free_spot("car", ledger, clock.now) is None


def test_find_free_spot_for_window_skips_walk_ins(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    registry.occupy(registry.get("C1"), make_vehicle("WALK1"))
    start = clock.now + timedelta(hours=1)
    assert registry.find_free_spot_for_window("car", start, start + timedelta(hours=1), ledger) is None


def test_release_drops_stale_reservations(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    reservation = ledger.create(
        spot, make_vehicle("RES1"), clock.now - timedelta(hours=2), clock.now - timedelta(hours=1)
    )
    registry.reserve(spot, reservation)
    registry.occupy(spot, make_vehicle("WALK1"))

    registry.release(spot, ledger, clock.now)
    assert spot.state == SpotState.FREE
    assert spot.reservation_id is None
    assert spot.vehicle_plate is None


def test_release_keeps_upcoming_reservation(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 1})
    ledger = ReservationLedger()
    spot = registry.get("C1")
    registry.occupy(spot, make_vehicle("WALK1"))
    reservation = ledger.create(
        spot, make_vehicle("RES1"), clock.now + timedelta(hours=2), clock.now + timedelta(hours=3)
    )
    registry.reserve(spot, reservation)

    registry.release(spot, ledger, clock.now)
    assert spot.state == SpotState.RESERVED
    assert spot.reservation_id == reservation.id


def test_release_stale_reservations(clock, make_vehicle):
    registry = SpotRegistry.build({"standard": 2})
    ledger = ReservationLedger()
    expired = ledger.create(
        registry.get("C1"),
        make_vehicle("OLD1"),
        clock.now - timedelta(hours=2),
        clock.now - timedelta(hours=1),
    )
    upcoming = ledger.create(
        registry.get("C2"),
        make_vehicle("NEW1"),
        clock.now + timedelta(hours=1),
        clock.now + timedelta(hours=2),
    )
    registry.reserve(registry.get("C1"), expired)
    registry.reserve(registry.get("C2"), upcoming)

    assert registry.find_free_spot("car") is None
    assert registry.find_free_spot("car", ledger, clock.now).id == "C1"

    released = registry.release_stale_reservations(ledger, clock.now)
    assert [spot.id for spot in released] == ["C1"]
    assert registry.get("C1").is_available()
    assert registry.get("C2").state == SpotState.RESERVED
