"""
Payment service - payments collected for bookings and their refunds

A paid payment confirms a pending or modified booking. When a booking is
cancelled the policy refund is booked back onto its paid payments.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from booking_core.booking.cancellation import allocate_refund
from booking_core.booking.pricing import round_money, to_decimal
from booking_core.booking.status import ACTIVE_STATUSES, BookingStatus, BookingTrigger, can_transition, next_status
from booking_core.errors import BookingNotFoundError, BookingValidationError
from frontdesk.models.ontology import Booking, Payment, PaymentStatus, User
from frontdesk.models.schemas import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    """Payment service"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = None):
        self.db = db
        self._now = clock or datetime.now

    def get_payments(self, booking_id: int) -> List[Payment]:
        return self.db.query(Payment).filter(Payment.booking_id == booking_id).order_by(Payment.id).all()

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.id == payment_id).first()

    def record_payment(self, booking_id: int, data: PaymentCreate, actor: Optional[User] = None) -> Payment:
        """
        Record a payment for a booking.

        An open (pending) payment of the booking is settled instead of adding
        a second one. A PAID payment confirms a PENDING or MODIFIED booking.

        Raises:
            BookingNotFoundError: unknown booking
            BookingValidationError: booking is cancelled or completed, or the
                payment status is not one a new payment can have
        """
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        if booking.status not in ACTIVE_STATUSES:
            raise BookingValidationError([f"Booking {booking.booking_number} is {booking.status.value}; "
                                          f"no payments accepted"])
        if data.status not in (PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.FAILED):
            raise BookingValidationError([f"A new payment cannot be {data.status.value}"])

        amount = round_money(to_decimal(data.amount if data.amount is not None else booking.total_price,
                                        field="total_price"))
        now = self._now()
        try:
            payment = next((p for p in booking.payments if p.status == PaymentStatus.PENDING), None)
            if payment is None:
                payment = Payment(booking_id=booking.id, created_by=actor.id if actor else None)
                self.db.add(payment)
            payment.amount = amount
            payment.method = data.method
            payment.status = data.status
            payment.transaction_ref = data.transaction_ref
            payment.paid_at = now if data.status == PaymentStatus.PAID else None

            if data.status == PaymentStatus.PAID and can_transition(
                    booking.status, BookingStatus.CONFIRMED, BookingTrigger.CONFIRM):
                booking.status = next_status(booking.status, BookingStatus.CONFIRMED, BookingTrigger.CONFIRM)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(payment)
        logger.info(f"Payment {payment.id} for booking {booking.booking_number}: "
                    f"{payment.amount} {payment.method.value}, {payment.status.value}")
        return payment

    def apply_refund(self, booking: Booking, refund: Decimal) -> List[Payment]:
        """
        Book a cancellation refund onto the booking's paid payments.

        Fully refunded payments become REFUNDED, partly refunded ones PARTIAL.
        Runs inside the caller's transaction; nothing is committed here.

        Returns:
            payments that received part of the refund
        """
        paid = [p for p in booking.payments if p.status == PaymentStatus.PAID]
        touched = []
        for payment, share in zip(paid, allocate_refund(refund, [p.amount for p in paid])):
            if share <= 0:
                continue
            payment.refunded_amount = share
            payment.status = PaymentStatus.REFUNDED if share >= payment.amount else PaymentStatus.PARTIAL
            touched.append(payment)
        return touched
