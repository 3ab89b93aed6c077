"""
Booking service - orchestrates the booking lifecycle

Create, edit and cancel run in one transaction each: validate, check
availability, price, persist and audit. Any error rolls the session back.
"""
import logging
import uuid
from datetime import datetime, date
from itertools import groupby
from typing import Callable, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from booking_core.booking.audit import BookingSnapshot, diff_and_record, format_date
from booking_core.booking.cancellation import CancellationQuote, compute_fee
from booking_core.booking.pricing import compute_total
from booking_core.booking.status import BookingStatus, BookingTrigger, RoomStatus, can_transition, next_status
from booking_core.booking.validation import collect_stay_errors
from booking_core.errors import (
    BookingNotFoundError, BookingValidationError, InvalidTransitionError, RoomUnavailableError
)
from frontdesk.config import settings
from frontdesk.models.ontology import (
    Booking, BookingCancellation, BookingModification, ExtraService, RoomCategory, User, UserRole
)
from frontdesk.models.schemas import BookingCreate, BookingUpdate, ExtraServiceResponse
from frontdesk.services.availability_service import AvailabilityService
from frontdesk.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


class BookingService:
    """Booking service"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = None):
        self.db = db
        # injectable for tests
        self._now = clock or datetime.now
        self.availability = AvailabilityService(db)
        self.payments = PaymentService(db, clock=self._now)

    # ============== Queries ==============

    def get_bookings(self, status: Optional[BookingStatus] = None,
                     guest_id: Optional[int] = None,
                     check_in_from: Optional[date] = None,
                     check_in_to: Optional[date] = None) -> List[Booking]:
        """List bookings, latest check-in first"""
        query = self.db.query(Booking)

        if status:
            query = query.filter(Booking.status == status)
        if guest_id is not None:
            query = query.filter(Booking.guest_id == guest_id)
        if check_in_from:
            query = query.filter(Booking.check_in_date >= check_in_from)
        if check_in_to:
            query = query.filter(Booking.check_in_date <= check_in_to)

        return query.order_by(Booking.check_in_date.desc(), Booking.id.desc()).all()

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_booking_by_number(self, booking_number: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.booking_number == booking_number).first()

    def require_booking(self, booking_id: int) -> Booking:
        booking = self.get_booking(booking_id)
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    def get_booking_detail(self, booking: Booking) -> dict:
        """Booking with guest, category and room names resolved"""
        return {
            'id': booking.id,
            'booking_number': booking.booking_number,
            'guest_id': booking.guest_id,
            'guest_name': booking.guest.name if booking.guest else None,
            'category_id': booking.category_id,
            'category_name': booking.category.name if booking.category else None,
            'room_id': booking.room_id,
            'room_number': booking.room.room_number if booking.room else None,
            'check_in_date': booking.check_in_date,
            'check_out_date': booking.check_out_date,
            'nights': booking.nights,
            'guests': booking.guests,
            'total_price': booking.total_price,
            'status': booking.status,
            'extras': [ExtraServiceResponse.model_validate(e) for e in booking.extras],
            'created_at': booking.created_at,
        }

    def get_modification_history(self, booking_id: int) -> List[dict]:
        """Modification records grouped per edit (timestamp and actor), newest first"""
        self.require_booking(booking_id)
        records = self.db.query(BookingModification).filter(
            BookingModification.booking_id == booking_id
        ).order_by(BookingModification.modified_at.desc(), BookingModification.id).all()

        groups = []
        for (modified_at, handled_by), changes in groupby(records, key=lambda m: (m.modified_at, m.handled_by)):
            changes = list(changes)
            groups.append({
                'modified_at': modified_at,
                'handled_by': handled_by,
                'reason': changes[0].reason,
                'changes': changes,
            })
        return groups

    def get_cancellation(self, booking_id: int) -> Optional[BookingCancellation]:
        self.require_booking(booking_id)
        return self.db.query(BookingCancellation).filter(
            BookingCancellation.booking_id == booking_id
        ).first()

    # ============== Helpers ==============

    def _generate_booking_number(self) -> str:
        """Booking number: date prefix + first 8 hex digits of a UUID4"""
        prefix = self._now().strftime(settings.BOOKING_NUMBER_PREFIX_FORMAT)
        while True:
            number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
            if not self.get_booking_by_number(number):
                return number

    @staticmethod
    def _handler_id(actor: Optional[User]) -> Optional[int]:
        """Staff member handling the action; NULL means guest self-service"""
        return actor.id if actor is not None and actor.is_staff else None

    def _resolve_guest_id(self, requested_guest_id: Optional[int], actor: Optional[User],
                          errors: List[str]) -> Optional[int]:
        """Guests book for themselves; staff and anonymous callers name the guest"""
        if actor is not None and actor.role == UserRole.GUEST:
            return actor.id
        if requested_guest_id is None:
            errors.append("Guest is required")
            return None
        guest = self.db.query(User).filter(User.id == requested_guest_id, User.is_active == True).first()
        if not guest:
            errors.append(f"Guest {requested_guest_id} does not exist")
            return None
        return guest.id

    def _load_category(self, category_id: Optional[int], errors: List[str]) -> Optional[RoomCategory]:
        category = self.db.query(RoomCategory).filter(RoomCategory.id == category_id).first()
        if not category:
            errors.append(f"Room category {category_id} does not exist")
            return None
        if not category.is_active:
            errors.append(f"Room category '{category.name}' is not bookable")
            return None
        return category

    def _load_extras(self, extra_ids: Sequence[int], errors: List[str]) -> List[ExtraService]:
        wanted = set(extra_ids or ())
        if not wanted:
            return []
        extras = self.db.query(ExtraService).filter(
            ExtraService.id.in_(wanted),
            ExtraService.is_active == True
        ).order_by(ExtraService.id).all()
        missing = wanted - {e.id for e in extras}
        if missing:
            errors.append(f"Unknown extra service(s): {', '.join(str(i) for i in sorted(missing))}")
        return extras

    # ============== Lifecycle ==============

    def create_booking(self, data: BookingCreate, actor: Optional[User] = None) -> Booking:
        """
        Create a booking in status PENDING.

        Raises:
            BookingValidationError: bad dates, guests, category, extras or guest
            RoomUnavailableError: no room of the category is free
        """
        now = self._now()
        errors = []
        category = self._load_category(data.category_id, errors)
        errors.extend(collect_stay_errors(
            data.check_in_date, data.check_out_date, data.guests, now.date(),
            is_new=True, max_occupancy=category.max_occupancy if category else None
        ))
        extras = self._load_extras(data.extra_ids, errors)
        guest_id = self._resolve_guest_id(data.guest_id, actor, errors)
        if errors:
            raise BookingValidationError(errors)

        try:
            room = self.availability.find_free_room(
                category.id, data.check_in_date, data.check_out_date, lock=True
            )
            if room is None:
                logger.warning(f"No {category.name} room free for {data.check_in_date} -> {data.check_out_date}")
                raise RoomUnavailableError()

            booking = Booking(
                booking_number=self._generate_booking_number(),
                guest_id=guest_id,
                category_id=category.id,
                room_id=room.id,
                check_in_date=data.check_in_date,
                check_out_date=data.check_out_date,
                guests=data.guests,
                total_price=compute_total(
                    category.price_per_night, data.check_in_date, data.check_out_date,
                    extras, data.guests
                ),
                status=BookingStatus.PENDING,
                created_by=actor.id if actor else None,
            )
            booking.extras = extras
            self.db.add(booking)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"Booking {booking.booking_number} created: room {room.room_number}, "
                    f"{booking.check_in_date} -> {booking.check_out_date}, total {booking.total_price}")
        return booking

    def update_booking(self, booking_id: int, data: BookingUpdate, actor: Optional[User] = None,
                       reason: Optional[str] = None) -> Tuple[Booking, List[BookingModification]]:
        """
        Edit dates, guests, category or extras of an active booking.

        The current room is kept while it stays free; otherwise another free
        room of the (possibly new) category is assigned. Every changed field
        is recorded with one shared timestamp. Saving without changes writes
        nothing and keeps the status.

        Returns:
            (booking, modification records written)
        """
        booking = self.require_booking(booking_id)
        if not can_transition(booking.status, BookingStatus.MODIFIED, BookingTrigger.MODIFY):
            raise InvalidTransitionError(booking.status.value, BookingStatus.MODIFIED.value, BookingTrigger.MODIFY)

        if reason is None:
            reason = data.reason
        updates = data.model_dump(exclude_unset=True, exclude={'reason'})
        category_id = updates.get('category_id') or booking.category_id
        check_in = updates.get('check_in_date', booking.check_in_date)
        check_out = updates.get('check_out_date', booking.check_out_date)
        guests = updates.get('guests', booking.guests)
        extra_ids = updates.get('extra_ids')
        if extra_ids is None:
            extra_ids = sorted(booking.extra_ids)

        unchanged = (
            category_id == booking.category_id
            and check_in == booking.check_in_date
            and check_out == booking.check_out_date
            and guests == booking.guests
            and set(extra_ids) == booking.extra_ids
        )
        if unchanged:
            logger.info(f"Booking {booking.booking_number} saved without changes")
            return booking, []

        now = self._now()
        errors = []
        if category_id == booking.category_id:
            category = booking.category
        else:
            category = self._load_category(category_id, errors)
        errors.extend(collect_stay_errors(
            check_in, check_out, guests, now.date(),
            is_new=check_in != booking.check_in_date,
            max_occupancy=category.max_occupancy if category else None
        ))
        # extras already on the booking stay valid even if since withdrawn from the catalog
        kept = [e for e in booking.extras if e.id in set(extra_ids)]
        extras = kept + self._load_extras(set(extra_ids) - booking.extra_ids, errors)
        if errors:
            raise BookingValidationError(errors)

        try:
            before = BookingSnapshot.capture(booking)

            room = self.availability.find_free_room(
                category.id, check_in, check_out,
                exclude_booking_id=booking.id,
                prefer_room_id=booking.room_id,
                lock=True
            )
            if room is None:
                logger.warning(f"Booking {booking.booking_number}: no {category.name} room free for {check_in} -> {check_out}")
                raise RoomUnavailableError()

            booking.category_id = category.id
            booking.category = category
            booking.room_id = room.id
            booking.room = room
            booking.check_in_date = check_in
            booking.check_out_date = check_out
            booking.guests = guests
            booking.extras = extras
            booking.total_price = compute_total(category.price_per_night, check_in, check_out, extras, guests)
            booking.status = next_status(booking.status, BookingStatus.MODIFIED, BookingTrigger.MODIFY)

            records = diff_and_record(
                before, booking,
                actor_id=self._handler_id(actor),
                timestamp=now,
                reason=reason
            )
            modifications = [
                BookingModification(
                    booking_id=r.booking_id,
                    modified_at=r.modified_at,
                    field_changed=r.field_changed,
                    old_value=r.old_value,
                    new_value=r.new_value,
                    reason=r.reason,
                    handled_by=r.actor_id,
                )
                for r in records
            ]
            self.db.add_all(modifications)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"Booking {booking.booking_number} modified, {len(modifications)} audit record(s) written")
        return booking, modifications

    def quote_cancellation(self, booking_id: int, now: Optional[datetime] = None) -> CancellationQuote:
        """Preview fee and refund without cancelling"""
        booking = self.require_booking(booking_id)
        if not can_transition(booking.status, BookingStatus.CANCELLED, BookingTrigger.CANCEL):
            raise InvalidTransitionError(booking.status.value, BookingStatus.CANCELLED.value, BookingTrigger.CANCEL)
        return compute_fee(booking, booking.total_price, now or self._now())

    def cancel_booking(self, booking_id: int, reason: Optional[str] = None,
                       actor: Optional[User] = None,
                       now: Optional[datetime] = None) -> BookingCancellation:
        """
        Cancel a booking and record fee and refund.

        The refund is booked onto the booking's paid payments. Cancelling a
        stay that is in progress sends its room to cleaning.

        Raises:
            InvalidTransitionError: booking is already cancelled or completed
            PreconditionViolation: booking has no total price
        """
        booking = self.require_booking(booking_id)
        now = now or self._now()
        source = booking.status
        try:
            booking.status = next_status(booking.status, BookingStatus.CANCELLED, BookingTrigger.CANCEL)
            quote = compute_fee(booking, booking.total_price, now)
            cancellation = BookingCancellation(
                booking_id=booking.id,
                cancelled_at=now,
                reason=reason or settings.DEFAULT_CANCELLATION_REASON,
                cancellation_fee=quote.fee,
                refunded_amount=quote.refund,
                handled_by=self._handler_id(actor),
            )
            self.db.add(cancellation)
            refunded = self.payments.apply_refund(booking, quote.refund)
            if source == BookingStatus.CHECKED_IN:
                booking.room.status = RoomStatus.CLEANING
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(cancellation)
        logger.info(f"Booking {booking.booking_number} cancelled {quote.days_before} days before check-in: "
                    f"fee {quote.fee}, refund {quote.refund} over {len(refunded)} payment(s)")
        return cancellation

    def _transition(self, booking_id: int, target: BookingStatus, trigger: str) -> Booking:
        booking = self.require_booking(booking_id)
        booking.status = next_status(booking.status, target, trigger)
        if target == BookingStatus.CHECKED_IN:
            booking.room.status = RoomStatus.OCCUPIED
        elif target == BookingStatus.COMPLETED:
            booking.room.status = RoomStatus.CLEANING
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Booking {booking.booking_number} -> {target.value}")
        return booking

    def confirm_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.CONFIRMED, BookingTrigger.CONFIRM)

    def check_in(self, booking_id: int) -> Booking:
        """
        Check the guest in; the assigned room becomes occupied.

        Only possible from the check-in date until the day before check-out.
        """
        booking = self.require_booking(booking_id)
        if not can_transition(booking.status, BookingStatus.CHECKED_IN, BookingTrigger.CHECK_IN):
            raise InvalidTransitionError(booking.status.value, BookingStatus.CHECKED_IN.value, BookingTrigger.CHECK_IN)
        today = self._now().date()
        if today < booking.check_in_date:
            logger.warning(f"Booking {booking.booking_number}: check-in attempted before {booking.check_in_date}")
            raise BookingValidationError([f"Check-in is not possible before {format_date(booking.check_in_date)}"])
        if today >= booking.check_out_date:
            raise BookingValidationError([f"Stay ended on {format_date(booking.check_out_date)}"])
        return self._transition(booking_id, BookingStatus.CHECKED_IN, BookingTrigger.CHECK_IN)

    def check_out(self, booking_id: int) -> Booking:
        """Check the guest out; the room goes to cleaning"""
        return self._transition(booking_id, BookingStatus.COMPLETED, BookingTrigger.CHECK_OUT)
