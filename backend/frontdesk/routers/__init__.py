# API Routers
from frontdesk.routers import auth, rooms, extras, bookings, users

__all__ = ['auth', 'rooms', 'extras', 'bookings', 'users']
