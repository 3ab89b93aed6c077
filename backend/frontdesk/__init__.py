"""
frontdesk - hotel front desk application

Persistence, services and HTTP layer around the booking_core engine.
"""
