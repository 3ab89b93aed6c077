# Persistent entities
from frontdesk.models.ontology import (
    RoomCategory, Room, ExtraService, User, UserRole,
    Booking, BookingCancellation, BookingModification, booking_extras,
    Payment, PaymentStatus, PaymentMethod
)

__all__ = [
    'RoomCategory', 'Room', 'ExtraService', 'User', 'UserRole',
    'Booking', 'BookingCancellation', 'BookingModification', 'booking_extras',
    'Payment', 'PaymentStatus', 'PaymentMethod'
]
