from parkinglot.services import (
    parking,
    payment,
    report,
    reservation,
    session,
    snapshot,
    subscription,
)

__all__ = [
    "parking",
    "reservation",
    "session",
    "payment",
    "subscription",
    "report",
    "snapshot",
]
