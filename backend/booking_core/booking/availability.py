"""
booking_core/booking/availability.py

Overlap checker - decides whether a room, or any room of a category, is
free for a requested stay.

Two stays on the same room conflict iff

    existing.check_in <= requested.check_out and existing.check_out >= requested.check_in

Both ends are inclusive: a stay ending on day N blocks a new stay starting
on day N (no same-day turnover). Cancelled bookings never conflict.

Rooms and bookings are read duck-typed: a room needs `id`, a booking needs
`id`, `room_id`, `check_in_date`, `check_out_date` and `status`.
"""
from datetime import date
from typing import Any, Iterable, Optional, Sequence
import logging

from booking_core.booking.status import BookingStatus

logger = logging.getLogger(__name__)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive overlap of [a_start, a_end] and [b_start, b_end]."""
    return a_start <= b_end and a_end >= b_start


def conflicts_with(
    existing: Any,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """Whether one existing booking blocks the requested range."""
    if exclude_booking_id is not None and existing.id == exclude_booking_id:
        return False
    if existing.status == BookingStatus.CANCELLED:
        return False
    return ranges_overlap(existing.check_in_date, existing.check_out_date, check_in, check_out)


def is_room_free(
    room_id: int,
    bookings: Iterable[Any],
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """True if no booking of `room_id` conflicts with the range."""
    return not any(
        b.room_id == room_id and conflicts_with(b, check_in, check_out, exclude_booking_id)
        for b in bookings
    )


def find_free_room(
    rooms: Sequence[Any],
    bookings: Iterable[Any],
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
    prefer_room_id: Optional[int] = None,
) -> Optional[Any]:
    """
    First room that is free for the whole range, or None.

    Args:
        rooms: Candidate rooms, in assignment order
        bookings: Existing bookings for those rooms
        check_in: Requested check-in date
        check_out: Requested check-out date
        exclude_booking_id: Booking ignored when re-validating its own edit
        prefer_room_id: Room tried first (keeps an edited booking in place)
    """
    bookings = list(bookings)
    ordered = sorted(rooms, key=lambda r: r.id != prefer_room_id) if prefer_room_id is not None else rooms
    for room in ordered:
        if is_room_free(room.id, bookings, check_in, check_out, exclude_booking_id):
            return room
    return None


def is_available(
    rooms: Sequence[Any],
    bookings: Iterable[Any],
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """
    Category-level availability: at least one room is free for the whole range.

    A category without rooms is never available. "No room" is an ordinary
    negative answer, not an error.
    """
    available = find_free_room(rooms, bookings, check_in, check_out, exclude_booking_id) is not None
    if not available:
        logger.debug(f"No free room among {len(rooms)} for {check_in} -> {check_out}")
    return available


__all__ = [
    "ranges_overlap",
    "conflicts_with",
    "is_room_free",
    "find_free_room",
    "is_available",
]
