from parkinglot.core.exceptions import (
    NotFoundError,
    ParkingLotError,
    PaymentError,
    ValidationError,
)
from parkinglot.domain.entities import ParkingSession
from parkinglot.domain.lot import ParkingLot
from parkinglot.domain.payments import PaymentProcessor
from parkinglot.schemas.payment import PaymentResponse
from parkinglot.schemas.session import CheckoutQuote, CheckoutResult, SessionResponse
from parkinglot.utils.constants import PaymentMethod
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


def prepare_checkout(lot: ParkingLot, license_plate: str) -> CheckoutQuote:
    """Stamp the exit time and quote the fee; the vehicle stays parked."""
    with lot.lock:
        now = lot.now()
        session = lot.sessions.get_open(license_plate)
        spot = lot.spots.get(session.spot_id)
        subscribed = lot.has_active_subscription(session.vehicle.license_plate)

        previous_exit = session.exit_time
        lot.sessions.prepare_checkout(session.vehicle.license_plate, now)
        hours = lot.sessions.duration(session)
        try:
            fee = 0.0 if subscribed else lot.fee_calculator.calculate_fee(
                session.vehicle.category, hours, spot.category
            )
        except ParkingLotError:
            session.exit_time = previous_exit
            raise

        payment = lot.payments.pending_for_session(session.id)
        if payment is None:
            payment = lot.payments.record(
                session.vehicle.license_plate, fee, now, session_id=session.id
            )
        else:
            payment.amount = fee
            payment.created_at = now

        logger.info(
            f"Checkout prepared for vehicle: {session.vehicle.license_plate} "
            f"at spot: {spot.id}, {hours:.2f}h, fee {fee:.2f}"
            + (" (subscription)" if subscribed else "")
        )
        return CheckoutQuote(
            session=SessionResponse.model_validate(session),
            duration_hours=round(hours, 4),
            fee=fee,
            subscribed=subscribed,
            payment=PaymentResponse.model_validate(payment),
        )


def finalize_checkout(
    lot: ParkingLot,
    license_plate: str,
    success: bool,
    method: PaymentMethod | None = None,
) -> CheckoutResult:
    """Settle a prepared checkout.

    On success the session closes and the spot is released; on failure the
    payment is marked failed and the vehicle remains parked.
    """
    with lot.lock:
        now = lot.now()
        session = lot.sessions.get_open(license_plate)
        payment = lot.payments.pending_for_session(session.id)
        if payment is None:
            raise ValidationError(
                f"Checkout has not been prepared for vehicle {session.vehicle.license_plate}"
            )

        lot.payments.settle(payment, success, now, method)
        lot.sessions.finalize(
            session.vehicle.license_plate, success, lot.spots, lot.reservations, now
        )
        if success:
            logger.info(
                f"Check-out for vehicle: {session.vehicle.license_plate} from spot: "
                f"{session.spot_id}, paid {payment.amount:.2f} "
                f"(receipt {payment.receipt_number})"
            )
        else:
            logger.warning(
                f"Payment failed for vehicle: {session.vehicle.license_plate}, "
                f"vehicle remains at spot: {session.spot_id}"
            )
        return CheckoutResult(
            session=SessionResponse.model_validate(session),
            payment=PaymentResponse.model_validate(payment),
            paid=success,
            released_spot_id=session.spot_id if success else None,
        )


def checkout(
    lot: ParkingLot, license_plate: str, processor: PaymentProcessor | None = None
) -> CheckoutResult:
    """Prepare, pay and finalize in one step.

    A zero fee settles without touching the processor.
    """
    with lot.lock:
        quote = prepare_checkout(lot, license_plate)
        if quote.fee == 0:
            method = PaymentMethod.SUBSCRIPTION if quote.subscribed else None
            return finalize_checkout(lot, license_plate, True, method)
        if processor is None:
            raise PaymentError(f"A payment method is required to pay {quote.fee:.2f}")
        success = processor.process(quote.fee)
        return finalize_checkout(lot, license_plate, success, processor.method)


def get_open_session(lot: ParkingLot, license_plate: str) -> ParkingSession:
    return lot.sessions.get_open(license_plate)


def list_open_sessions(lot: ParkingLot) -> list[ParkingSession]:
    with lot.lock:
        return lot.sessions.list_open()


def get_session_by_ticket(lot: ParkingLot, ticket_number: str) -> ParkingSession:
    ticket = ticket_number.strip().upper()
    for session in lot.sessions.history():
        if session.ticket_number == ticket:
            return session
    raise NotFoundError("Session not found")
