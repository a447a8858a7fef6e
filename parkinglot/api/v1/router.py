from fastapi import APIRouter

from parkinglot.api.v1 import (
    parking_spaces,
    payments,
    rates,
    reports,
    reservations,
    sessions,
    snapshots,
    subscriptions,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(parking_spaces.router)
api_router.include_router(sessions.router)
api_router.include_router(reservations.router)
api_router.include_router(subscriptions.router)
api_router.include_router(payments.router)
api_router.include_router(rates.router)
api_router.include_router(reports.router)
api_router.include_router(snapshots.router)
