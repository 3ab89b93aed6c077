"""
Service layer - database-backed operations around the booking engine
"""
from frontdesk.services.availability_service import AvailabilityService
from frontdesk.services.booking_service import BookingService
from frontdesk.services.payment_service import PaymentService
from frontdesk.services.room_service import RoomService
from frontdesk.services.extra_service import ExtraCatalogService
from frontdesk.services.user_service import UserService

__all__ = ['AvailabilityService', 'BookingService', 'PaymentService', 'RoomService', 'ExtraCatalogService', 'UserService']
