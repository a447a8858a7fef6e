"""
Payment processors used at checkout and for subscriptions, and the ledger
recording every payment attempt.

Processors only validate the payment details they are given and report
success; no money moves anywhere.
"""

import re
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from parkinglot.core.exceptions import NotFoundError
from parkinglot.domain.entities import PaymentRecord
from parkinglot.utils.constants import PaymentMethod, PaymentStatus
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)

UPI_ID_PATTERN = re.compile(r"^[\w.\-]+@[\w.\-]+$")


def generate_receipt_number() -> str:
    return f"RCP-{uuid.uuid4().hex[:12].upper()}"


class PaymentProcessor(Protocol):
    method: PaymentMethod

    def process(self, amount: float) -> bool: ...


class CardPayment:
    method = PaymentMethod.CARD

    def __init__(self, card_number: str, expiry_date: str, cvv: str, card_holder_name: str):
        self.card_number = card_number.replace(" ", "")
        self.expiry_date = expiry_date
        self.cvv = cvv
        self.card_holder_name = card_holder_name

    @property
    def details(self) -> str:
        return f"Credit Card: **** **** **** {self.card_number[-4:]}"

    def is_valid(self) -> bool:
        return (
            len(self.card_number) == 16
            and self.card_number.isdigit()
            and len(self.cvv) == 3
            and self.cvv.isdigit()
        )

    def process(self, amount: float) -> bool:
        success = self.is_valid()
        logger.info(
            f"Card payment of {amount:.2f} for card ending in {self.card_number[-4:]}: "
            f"{'approved' if success else 'declined'}"
        )
        return success


class UPIPayment:
    method = PaymentMethod.UPI

    def __init__(self, upi_id: str):
        self.upi_id = upi_id.strip()

    @property
    def details(self) -> str:
        return f"UPI ID: {self.upi_id}"

    def process(self, amount: float) -> bool:
        success = bool(UPI_ID_PATTERN.match(self.upi_id))
        logger.info(
            f"UPI payment of {amount:.2f} from {self.upi_id}: "
            f"{'approved' if success else 'declined'}"
        )
        return success


class PaymentLedger:
    def __init__(self, payments: Iterable[PaymentRecord] = (), next_id: int | None = None):
        self._payments: dict[int, PaymentRecord] = {p.id: p for p in payments}
        self._next_id = next_id or max(self._payments, default=0) + 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._payments)

    def record(
        self,
        license_plate: str,
        amount: float,
        now: datetime,
        session_id: int | None = None,
        method: PaymentMethod | None = None,
    ) -> PaymentRecord:
        payment = PaymentRecord(
            id=self._next_id,
            receipt_number=generate_receipt_number(),
            license_plate=license_plate,
            amount=amount,
            session_id=session_id,
            method=method,
            created_at=now,
        )
        self._payments[payment.id] = payment
        self._next_id += 1
        return payment

    def get(self, payment_id: int) -> PaymentRecord:
        payment = self._payments.get(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    def settle(
        self,
        payment: PaymentRecord,
        success: bool,
        now: datetime,
        method: PaymentMethod | None = None,
    ) -> PaymentRecord:
        if method is not None:
            payment.method = method
        if success:
            payment.status = PaymentStatus.COMPLETED
            payment.paid_at = now
        else:
            payment.status = PaymentStatus.FAILED
        return payment

    def pending_for_session(self, session_id: int) -> PaymentRecord | None:
        for payment in reversed(self._payments.values()):
            if payment.session_id == session_id and payment.status == PaymentStatus.PENDING:
                return payment
        return None

    def all(self) -> list[PaymentRecord]:
        return list(self._payments.values())
