"""
Booking routes

Anyone may create a booking without a token (self-service). Every route on
an existing booking needs a token: a guest token reaches only that guest's
own bookings, staff tokens reach all of them.
"""
import logging
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from booking_core.booking.status import BookingStatus
from booking_core.errors import (
    BookingError, BookingNotFoundError, BookingValidationError, InvalidTransitionError, RoomUnavailableError
)
from frontdesk.database import get_db
from frontdesk.models.ontology import Booking, User, UserRole
from frontdesk.models.schemas import (
    BookingCreate, BookingUpdate, BookingCancel, BookingResponse, BookingUpdateResponse,
    CancellationQuoteResponse, CancellationResponse, ModificationGroup, ModificationResponse,
    PaymentCreate, PaymentResponse
)
from frontdesk.security.auth import get_current_user, get_optional_user, require_staff
from frontdesk.services.booking_service import BookingService
from frontdesk.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

HANDLED_ERRORS = (BookingNotFoundError, BookingValidationError, InvalidTransitionError)


def to_http_error(error: BookingError) -> HTTPException:
    """Map a booking engine error to an HTTP error"""
    if isinstance(error, BookingNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (RoomUnavailableError, InvalidTransitionError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.errors)


def _get_owned_booking(service: BookingService, booking_id: int, user: User) -> Booking:
    booking = service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Booking {booking_id} not found")
    if user.role == UserRole.GUEST and booking.guest_id != user.id:
        logger.warning(f"User {user.id} denied access to booking {booking_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your booking")
    return booking


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[BookingStatus] = None,
    guest_id: Optional[int] = None,
    check_in_from: Optional[date] = None,
    check_in_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """List bookings"""
    service = BookingService(db)
    bookings = service.get_bookings(status, guest_id, check_in_from, check_in_to)
    return [BookingResponse(**service.get_booking_detail(b)) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Booking details"""
    service = BookingService(db)
    booking = _get_owned_booking(service, booking_id, current_user)
    return BookingResponse(**service.get_booking_detail(booking))


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Create a booking; a free room of the category is assigned"""
    service = BookingService(db)
    try:
        booking = service.create_booking(data, current_user)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return BookingResponse(**service.get_booking_detail(booking))


@router.put("/{booking_id}", response_model=BookingUpdateResponse)
def update_booking(
    booking_id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit a booking; returns the booking and the changes recorded"""
    service = BookingService(db)
    _get_owned_booking(service, booking_id, current_user)
    try:
        booking, modifications = service.update_booking(booking_id, data, current_user)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return BookingUpdateResponse(
        booking=BookingResponse(**service.get_booking_detail(booking)),
        modifications=[ModificationResponse.model_validate(m) for m in modifications]
    )


@router.get("/{booking_id}/cancellation-quote", response_model=CancellationQuoteResponse)
def quote_cancellation(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Preview the cancellation fee without cancelling"""
    service = BookingService(db)
    booking = _get_owned_booking(service, booking_id, current_user)
    try:
        quote = service.quote_cancellation(booking_id)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return CancellationQuoteResponse(
        booking_id=booking.id,
        total_price=booking.total_price,
        days_before=quote.days_before,
        fee_rate=quote.fee_rate,
        fee=quote.fee,
        refund=quote.refund,
        is_free=quote.is_free,
        timeframe=quote.timeframe
    )


@router.post("/{booking_id}/cancel", response_model=CancellationResponse)
def cancel_booking(
    booking_id: int,
    data: BookingCancel,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cancel a booking"""
    service = BookingService(db)
    _get_owned_booking(service, booking_id, current_user)
    try:
        return service.cancel_booking(booking_id, data.reason, current_user)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    service = BookingService(db)
    try:
        booking = service.confirm_booking(booking_id)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return BookingResponse(**service.get_booking_detail(booking))


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def check_in(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    service = BookingService(db)
    try:
        booking = service.check_in(booking_id)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return BookingResponse(**service.get_booking_detail(booking))


@router.post("/{booking_id}/check-out", response_model=BookingResponse)
def check_out(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    service = BookingService(db)
    try:
        booking = service.check_out(booking_id)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
    return BookingResponse(**service.get_booking_detail(booking))


@router.get("/{booking_id}/modifications", response_model=List[ModificationGroup])
def get_modifications(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Modification history, one group per edit, newest first"""
    service = BookingService(db)
    _get_owned_booking(service, booking_id, current_user)
    return [
        ModificationGroup(
            modified_at=group['modified_at'],
            handled_by=group['handled_by'],
            reason=group['reason'],
            changes=[ModificationResponse.model_validate(m) for m in group['changes']]
        )
        for group in service.get_modification_history(booking_id)
    ]


@router.get("/{booking_id}/payments", response_model=List[PaymentResponse])
def list_payments(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    _get_owned_booking(BookingService(db), booking_id, current_user)
    return PaymentService(db).get_payments(booking_id)


@router.post("/{booking_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    booking_id: int,
    data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Record a payment; a paid payment confirms the booking"""
    _get_owned_booking(BookingService(db), booking_id, current_user)
    try:
        return PaymentService(db).record_payment(booking_id, data, current_user)
    except HANDLED_ERRORS as e:
        raise to_http_error(e)
