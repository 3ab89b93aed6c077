"""
booking_core/booking/validation.py

Request validation run before any availability check or write.
"""
from datetime import date
from typing import List, Optional

from booking_core.errors import BookingValidationError


def collect_stay_errors(
    check_in: Optional[date],
    check_out: Optional[date],
    guests: Optional[int],
    today: date,
    is_new: bool = True,
    max_occupancy: Optional[int] = None,
) -> List[str]:
    """
    Return every problem with a requested stay, or an empty list.

    Past check-in dates are only rejected for new bookings; an edit of a
    stay that already started keeps its original check-in.
    """
    errors = []
    if check_in is None:
        errors.append("Check-in date is required")
    if check_out is None:
        errors.append("Check-out date is required")
    if check_in is not None and check_out is not None and check_out <= check_in:
        errors.append("Check-out date must be after check-in date")
    if is_new and check_in is not None and check_in < today:
        errors.append("Check-in date cannot be in the past")
    if guests is None or guests < 1:
        errors.append("Guest count must be at least 1")
    elif max_occupancy is not None and guests > max_occupancy:
        errors.append(f"Guest count {guests} exceeds the category maximum of {max_occupancy}")
    return errors


def validate_stay(
    check_in: Optional[date],
    check_out: Optional[date],
    guests: Optional[int],
    today: date,
    is_new: bool = True,
    max_occupancy: Optional[int] = None,
) -> None:
    """
    Raises:
        BookingValidationError: listing all problems at once
    """
    errors = collect_stay_errors(check_in, check_out, guests, today, is_new, max_occupancy)
    if errors:
        raise BookingValidationError(errors)


__all__ = ["collect_stay_errors", "validate_stay"]
