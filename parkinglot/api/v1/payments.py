from fastapi import APIRouter, Query

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.payment import PaymentListResponse, PaymentResponse
from parkinglot.services import payment as payment_service
from parkinglot.utils.constants import PaymentStatus

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    lot: Lot,
    license_plate: str | None = Query(None),
    status: PaymentStatus | None = Query(None),
):
    return payment_service.get_payments(lot, license_plate, status)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(lot: Lot, payment_id: int):
    return payment_service.get_payment(lot, payment_id)
