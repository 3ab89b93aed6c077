"""
booking_core/booking/status.py

Booking and room status model plus the booking transition table.

PENDING -> CONFIRMED -> CHECKED_IN -> COMPLETED is the happy path.
CANCELLED is reachable from every non-final state and is final.
MODIFIED is set whenever an edit is committed; it is not final and a
modified booking can still be confirmed, checked in, edited again or
cancelled.
"""
from enum import Enum
from typing import Optional

from booking_core.engine.state_machine import (
    StateMachine,
    StateMachineConfig,
    StateTransition,
)
from booking_core.errors import InvalidTransitionError


class BookingStatus(str, Enum):
    """Booking status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    MODIFIED = "modified"


class RoomStatus(str, Enum):
    """Physical room status"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"
    INACTIVE = "inactive"


# Rooms in these states are never assigned to a stay.
UNBOOKABLE_ROOM_STATUSES = frozenset({
    RoomStatus.MAINTENANCE,
    RoomStatus.OUT_OF_SERVICE,
    RoomStatus.INACTIVE,
})


class BookingTrigger:
    """Action names used as transition triggers."""
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    MODIFY = "modify"


def _edges(sources, target: BookingStatus, trigger: str):
    return [StateTransition(s.value, target.value, trigger) for s in sources]


BOOKING_TRANSITIONS = (
    _edges([BookingStatus.PENDING, BookingStatus.MODIFIED], BookingStatus.CONFIRMED, BookingTrigger.CONFIRM)
    + _edges([BookingStatus.CONFIRMED, BookingStatus.MODIFIED], BookingStatus.CHECKED_IN, BookingTrigger.CHECK_IN)
    + _edges([BookingStatus.CHECKED_IN], BookingStatus.COMPLETED, BookingTrigger.CHECK_OUT)
    + _edges(
        [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, BookingStatus.MODIFIED],
        BookingStatus.CANCELLED,
        BookingTrigger.CANCEL,
    )
    + _edges(
        [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.MODIFIED],
        BookingStatus.MODIFIED,
        BookingTrigger.MODIFY,
    )
)

FINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})

# Statuses whose bookings still hold a room and accept payments.
ACTIVE_STATUSES = frozenset(BookingStatus) - FINAL_STATUSES


def booking_state_machine(current: Optional[BookingStatus] = None) -> StateMachine:
    """Create a booking state machine positioned at `current`."""
    return StateMachine(
        config=StateMachineConfig(
            name="Booking",
            states=[s.value for s in BookingStatus],
            transitions=list(BOOKING_TRANSITIONS),
            initial_state=BookingStatus.PENDING.value,
        ),
        current_state=BookingStatus(current).value if current is not None else None,
    )


def can_transition(current: BookingStatus, target: BookingStatus, trigger: str) -> bool:
    return booking_state_machine(current).can_transition_to(BookingStatus(target).value, trigger)


def next_status(current: BookingStatus, target: BookingStatus, trigger: str) -> BookingStatus:
    """
    Resolve a transition through the table.

    Raises:
        InvalidTransitionError: if the table has no such edge
    """
    machine = booking_state_machine(current)
    if not machine.transition_to(BookingStatus(target).value, trigger):
        raise InvalidTransitionError(BookingStatus(current).value, BookingStatus(target).value, trigger)
    return BookingStatus(machine.current_state)


__all__ = [
    "BookingStatus",
    "RoomStatus",
    "UNBOOKABLE_ROOM_STATUSES",
    "BookingTrigger",
    "BOOKING_TRANSITIONS",
    "FINAL_STATUSES",
    "ACTIVE_STATUSES",
    "booking_state_machine",
    "can_transition",
    "next_status",
]
