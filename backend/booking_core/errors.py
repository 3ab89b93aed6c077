"""
booking_core/errors.py

Error taxonomy of the booking engine.

- BookingValidationError: the request is wrong; nothing was applied
- RoomUnavailableError: a create/edit asked for a range with no free room
- InvalidTransitionError: the booking's status does not allow the action
- PreconditionViolation: data the engine assumes validated is missing,
  i.e. a broken invariant upstream rather than a user mistake
"""
from typing import Iterable, List, Optional


class BookingError(Exception):
    """Base class for booking engine errors."""


class BookingValidationError(BookingError):
    """Request failed validation. `errors` holds one message per problem."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class RoomUnavailableError(BookingValidationError):
    """No room of the requested category is free for the whole range."""

    def __init__(self, message: str = "No room available for the selected category and dates"):
        super().__init__([message])


class InvalidTransitionError(BookingError):

    def __init__(self, current_state: str, target_state: str, trigger: str):
        self.current_state = current_state
        self.target_state = target_state
        self.trigger = trigger
        super().__init__(
            f"Booking in status '{current_state}' cannot {trigger.replace('_', ' ')}"
        )


class PreconditionViolation(BookingError):
    """A required field was missing on data the engine expects to be valid."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class BookingNotFoundError(BookingError):
    pass


__all__ = [
    "BookingError",
    "BookingValidationError",
    "RoomUnavailableError",
    "InvalidTransitionError",
    "PreconditionViolation",
    "BookingNotFoundError",
]
