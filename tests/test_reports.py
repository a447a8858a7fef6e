from datetime import timedelta

import pytest
from httpx import AsyncClient

from parkinglot.domain.payments import CardPayment
from parkinglot.services import parking as parking_service
from parkinglot.services import report as report_service
from parkinglot.services import reservation as reservation_service
from parkinglot.services import session as session_service
from parkinglot.services import subscription as subscription_service
from parkinglot.utils.constants import SubscriptionPlan


@pytest.fixture
def busy_lot(lot, clock, make_vehicle):
    parking_service.check_in(lot, make_vehicle("AB12"))
    clock.advance(hours=1)
    session_service.prepare_checkout(lot, "AB12")
    session_service.finalize_checkout(lot, "AB12", True)

    parking_service.check_in(lot, make_vehicle("AB12"))
    parking_service.check_in(lot, make_vehicle("BK1", "bike"))
    reservation_service.make_reservation(
        lot, make_vehicle("CD34"), clock.now - timedelta(minutes=1), clock.now + timedelta(hours=1)
    )
    subscription_service.register(
        lot,
        make_vehicle("EF56"),
        SubscriptionPlan.MONTHLY,
        "standard",
        CardPayment("4111111111111111", "12/30", "123", "A Driver"),
    )
    return lot


def test_security_log_groups_by_plate(busy_lot):
    report = report_service.get_security_logs(busy_lot)
    assert report.total_sessions == 3
    by_plate = {entry.license_plate: entry.sessions for entry in report.entries}
    assert len(by_plate["AB12"]) == 2
    assert by_plate["AB12"][0].exit_time is not None
    assert by_plate["AB12"][1].exit_time is None

    report = report_service.get_security_logs(busy_lot, license_plate="bk1")
    assert [entry.license_plate for entry in report.entries] == ["BK1"]


def test_security_log_by_day(busy_lot, clock):
    report = report_service.get_security_logs(busy_lot, day=clock.now.date())
    assert report.total_sessions == 3

    report = report_service.get_security_logs(busy_lot, day=clock.now.date() - timedelta(days=1))
    assert report.entries == []


def test_transaction_summary(busy_lot):
    summary = report_service.get_transaction_summary(busy_lot)
    assert summary.total_payments == 2
    assert summary.completed == 2
    assert summary.total_revenue == 4968.0
    assert summary.revenue_by_method == {"none": 40.0, "card": 4928.0}


def test_dashboard(busy_lot):
    dashboard = report_service.get_dashboard_summary(busy_lot)
    assert dashboard.parked_vehicles == 2
    assert dashboard.active_reservations == 1
    assert dashboard.active_subscriptions == 1
    assert dashboard.today_entries == 3
    assert dashboard.today_revenue == 4968.0
    assert dashboard.availability.total_available == 7


@pytest.mark.asyncio
async def test_report_endpoints(client: AsyncClient, busy_lot, clock):
    response = await client.get("/api/v1/reports/dashboard")
    assert response.status_code == 200
    assert response.json()["parked_vehicles"] == 2

    response = await client.get(
        "/api/v1/reports/security-logs", params={"day": clock.now.date().isoformat()}
    )
    assert response.json()["total_sessions"] == 3

    response = await client.get("/api/v1/reports/transactions")
    assert response.json()["completed"] == 2
