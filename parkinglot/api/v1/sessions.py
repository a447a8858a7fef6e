from fastapi import APIRouter

from parkinglot.core.dependencies import Lot
from parkinglot.schemas.session import (
    CheckInRequest,
    CheckInResponse,
    CheckoutFinalizeRequest,
    CheckoutQuote,
    CheckoutRequest,
    CheckoutResult,
    SessionListResponse,
    SessionResponse,
)
from parkinglot.services import parking as parking_service
from parkinglot.services import payment as payment_service
from parkinglot.services import session as session_service

router = APIRouter(prefix="/sessions", tags=["Parking Sessions"])


@router.post("/check-in", response_model=CheckInResponse)
async def check_in(lot: Lot, data: CheckInRequest):
    spot = parking_service.check_in(lot, data.vehicle.to_vehicle())
    return parking_service.check_in_response(lot, spot)


@router.get("/active", response_model=SessionListResponse)
async def list_active_sessions(lot: Lot):
    sessions = session_service.list_open_sessions(lot)
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        total=len(sessions),
    )


@router.get("/ticket/{ticket_number}", response_model=SessionResponse)
async def get_session_by_ticket(lot: Lot, ticket_number: str):
    return session_service.get_session_by_ticket(lot, ticket_number)


@router.get("/{license_plate}", response_model=SessionResponse)
async def get_open_session(lot: Lot, license_plate: str):
    return session_service.get_open_session(lot, license_plate)


@router.post("/{license_plate}/checkout/prepare", response_model=CheckoutQuote)
async def prepare_checkout(lot: Lot, license_plate: str):
    return session_service.prepare_checkout(lot, license_plate)


@router.post("/{license_plate}/checkout/finalize", response_model=CheckoutResult)
async def finalize_checkout(lot: Lot, license_plate: str, data: CheckoutFinalizeRequest):
    return session_service.finalize_checkout(lot, license_plate, data.success)


@router.post("/{license_plate}/checkout", response_model=CheckoutResult)
async def checkout(lot: Lot, license_plate: str, data: CheckoutRequest | None = None):
    data = data or CheckoutRequest()
    processor = payment_service.build_processor(data.payment_method, data.card, data.upi)
    return session_service.checkout(lot, license_plate, processor)
