from parkinglot.core.exceptions import PaymentError
from parkinglot.domain.entities import PaymentRecord, parse_spot_category, parse_vehicle_category
from parkinglot.domain.lot import ParkingLot
from parkinglot.domain.payments import CardPayment, PaymentProcessor, UPIPayment
from parkinglot.schemas.payment import (
    CardDetails,
    FeeQuoteResponse,
    PaymentListResponse,
    PaymentResponse,
    RateTable,
    UPIDetails,
)
from parkinglot.utils.constants import PaymentMethod, PaymentStatus, SpotCategory, VehicleCategory
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


def build_processor(
    method: PaymentMethod | None,
    card: CardDetails | None = None,
    upi: UPIDetails | None = None,
) -> PaymentProcessor | None:
    if method is None:
        return None
    if method == PaymentMethod.CARD:
        if card is None:
            raise PaymentError("Card details are required for card payments")
        return CardPayment(card.card_number, card.expiry_date, card.cvv, card.card_holder_name)
    if method == PaymentMethod.UPI:
        if upi is None:
            raise PaymentError("A UPI ID is required for UPI payments")
        return UPIPayment(upi.upi_id)
    raise PaymentError(f"Payment method {method.value} cannot be charged directly")


def get_payment(lot: ParkingLot, payment_id: int) -> PaymentRecord:
    return lot.payments.get(payment_id)


def get_payments(
    lot: ParkingLot,
    license_plate: str | None = None,
    status: PaymentStatus | None = None,
) -> PaymentListResponse:
    with lot.lock:
        payments = lot.payments.all()
    if license_plate:
        plate = license_plate.strip().upper()
        payments = [p for p in payments if p.license_plate == plate]
    if status:
        payments = [p for p in payments if p.status == status]
    total_amount = sum(p.amount for p in payments if p.status == PaymentStatus.COMPLETED)
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        total=len(payments),
        total_amount=round(total_amount, 2),
    )


def quote_fee(
    lot: ParkingLot,
    vehicle_type: VehicleCategory | str,
    spot_type: SpotCategory | str,
    hours: float,
) -> FeeQuoteResponse:
    vehicle_type = parse_vehicle_category(vehicle_type)
    spot_type = parse_spot_category(spot_type)
    return FeeQuoteResponse(
        vehicle_type=vehicle_type,
        spot_type=spot_type,
        hours=hours,
        surcharge=lot.pricing.surcharge_at(lot.now()),
        fee=lot.fee_calculator.calculate_fee(vehicle_type, hours, spot_type),
    )


def get_rate_table(lot: ParkingLot) -> RateTable:
    return lot.pricing.rate_table()


def set_base_rate(lot: ParkingLot, vehicle_type: VehicleCategory, rate: float) -> RateTable:
    with lot.lock:
        lot.pricing.set_base_rate(vehicle_type, rate)
        logger.info(f"Base rate for {vehicle_type.value} set to {rate:.2f}")
        return get_rate_table(lot)


def set_spot_multiplier(lot: ParkingLot, spot_type: SpotCategory, multiplier: float) -> RateTable:
    with lot.lock:
        lot.pricing.set_spot_multiplier(spot_type, multiplier)
        logger.info(f"Multiplier for {spot_type.value} spots set to {multiplier}")
        return get_rate_table(lot)
