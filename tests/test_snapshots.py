from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from parkinglot.core.exceptions import NotFoundError
from parkinglot.domain.lot import LotState, ParkingLot
from parkinglot.domain.payments import CardPayment
from parkinglot.services import parking as parking_service
from parkinglot.services import payment as payment_service
from parkinglot.services import reservation as reservation_service
from parkinglot.services import session as session_service
from parkinglot.services import snapshot as snapshot_service
from parkinglot.services import subscription as subscription_service
from parkinglot.utils.constants import (
    ReservationStatus,
    SpotCategory,
    SpotState,
    SubscriptionPlan,
    VehicleCategory,
)


def populate(lot: ParkingLot, clock, make_vehicle) -> None:
    parking_service.check_in(lot, make_vehicle("AB12"))
    parking_service.check_in(lot, make_vehicle("BK1", "bike"))
    reservation_service.make_reservation(
        lot, make_vehicle("CD34"), clock.now + timedelta(hours=1), clock.now + timedelta(hours=2)
    )
    subscription_service.register(
        lot,
        make_vehicle("EF56"),
        SubscriptionPlan.MONTHLY,
        "standard",
        CardPayment("4111111111111111", "12/30", "123", "A Driver"),
    )
    clock.advance(minutes=30)
    session_service.prepare_checkout(lot, "BK1")
    session_service.finalize_checkout(lot, "BK1", True)


def test_state_round_trip(lot, clock, make_vehicle):
    populate(lot, clock, make_vehicle)

    state = lot.to_state()
    restored = ParkingLot.from_state(type(state).model_validate_json(state.model_dump_json()), clock=clock)

    assert restored.to_state() == state
    assert restored.sessions.is_parked("AB12")
    assert not restored.sessions.is_parked("BK1")
    assert restored.has_active_subscription("EF56")
    assert restored.spots.get("C1").state == SpotState.OCCUPIED


def test_rates_survive_round_trip(lot, clock):
    payment_service.set_base_rate(lot, VehicleCategory.CAR, 55.0)
    payment_service.set_spot_multiplier(lot, SpotCategory.COMPACT, 0.4)

    state = LotState.model_validate_json(lot.to_state().model_dump_json())
    restored = ParkingLot.from_state(state, clock=clock)

    assert restored.pricing.base_rates[VehicleCategory.CAR] == 55.0
    assert restored.pricing.spot_multipliers[SpotCategory.COMPACT] == 0.4
    assert restored.fee_calculator.calculate_fee("car", 1, "standard") == 55.0
    # later rate changes do not leak back into the saved lot
    payment_service.set_base_rate(lot, VehicleCategory.CAR, 60.0)
    assert restored.pricing.base_rates[VehicleCategory.CAR] == 55.0


def test_to_state_is_detached(lot, make_vehicle):
    state = lot.to_state()
    parking_service.check_in(lot, make_vehicle("AB12"))
    assert state.spots[0].state == SpotState.FREE


def test_restored_lot_keeps_working(lot, clock, make_vehicle):
    populate(lot, clock, make_vehicle)
    restored = ParkingLot.from_state(lot.to_state(), clock=clock)

    # ids keep counting from where the saved lot stopped
    reservation = reservation_service.make_reservation(
        restored, make_vehicle("GH78"), clock.now + timedelta(hours=3), clock.now + timedelta(hours=4)
    )
    assert reservation.id == 2
    spot = parking_service.check_in(restored, make_vehicle("IJ90"))
    assert restored.sessions.get_open("IJ90").id == 3
    assert spot.state == SpotState.OCCUPIED

    clock.advance(minutes=31)
    spot = reservation_service.use_reservation(restored, "CD34")
    assert restored.reservations.get(1).status == ReservationStatus.CHECKED_IN
    assert spot.vehicle_plate == "CD34"


@pytest.mark.asyncio
async def test_save_and_load_snapshot(db_session: AsyncSession, lot, clock, make_vehicle):
    populate(lot, clock, make_vehicle)

    saved = await snapshot_service.save_snapshot(db_session, lot)
    await db_session.commit()
    assert saved.lot_name == "Test Lot"

    parking_service.check_in(lot, make_vehicle("LATE1"))
    restored, snapshot = await snapshot_service.load_snapshot(db_session, "Test Lot", clock=clock)

    assert snapshot.id == saved.id
    assert not restored.sessions.is_parked("LATE1")
    assert restored.sessions.is_parked("AB12")
    assert len(restored.reservations) == 1


@pytest.mark.asyncio
async def test_load_picks_latest_snapshot(db_session: AsyncSession, lot, clock, make_vehicle):
    first = await snapshot_service.save_snapshot(db_session, lot)
    parking_service.check_in(lot, make_vehicle("AB12"))
    second = await snapshot_service.save_snapshot(db_session, lot)
    await db_session.commit()

    latest, snapshot = await snapshot_service.load_snapshot(db_session, "Test Lot", clock=clock)
    assert snapshot.id == second.id
    assert latest.sessions.is_parked("AB12")

    older, _ = await snapshot_service.load_snapshot(db_session, "Test Lot", first.id, clock=clock)
    assert not older.sessions.is_parked("AB12")

    listing = await snapshot_service.list_snapshots(db_session, "Test Lot")
    assert listing.total == 2
    assert [s.id for s in listing.snapshots] == [second.id, first.id]


@pytest.mark.asyncio
async def test_load_missing_snapshot(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await snapshot_service.load_snapshot(db_session, "Nowhere")


@pytest.mark.asyncio
async def test_snapshot_endpoints(client, lot, clock, make_vehicle):
    populate(lot, clock, make_vehicle)

    response = await client.post("/api/v1/snapshots")
    assert response.status_code == 200
    snapshot_id = response.json()["id"]

    await client.post(
        "/api/v1/sessions/check-in",
        json={"vehicle": {"license_plate": "LATE1", "vehicle_type": "car"}},
    )
    response = await client.get("/api/v1/snapshots")
    assert response.json()["total"] == 1

    response = await client.post("/api/v1/snapshots/restore")
    assert response.status_code == 200
    data = response.json()
    assert data["snapshot"]["id"] == snapshot_id
    assert data["parked_vehicles"] == 1
    assert data["reservations"] == 1

    response = await client.get("/api/v1/sessions/LATE1")
    assert response.status_code == 404

    response = await client.post("/api/v1/snapshots/restore", params={"snapshot_id": 99})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_restore_brings_back_saved_rates(client, lot):
    await client.put("/api/v1/rates/base", json={"vehicle_type": "car", "rate": 50})
    response = await client.post("/api/v1/snapshots")
    assert response.status_code == 200

    response = await client.put("/api/v1/rates/base", json={"vehicle_type": "car", "rate": 70})
    assert response.json()["base_rates"]["car"] == 70.0

    response = await client.post("/api/v1/snapshots/restore")
    assert response.status_code == 200
    response = await client.get("/api/v1/rates")
    assert response.json()["base_rates"]["car"] == 50.0
