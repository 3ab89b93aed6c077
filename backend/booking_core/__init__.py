"""
booking_core - booking lifecycle engine

Pure, storage-agnostic building blocks of the front desk:
- engine: generic state machine
- booking: availability, pricing, cancellation policy, modification audit,
  validation and the booking status model

Nothing in this package touches a database session or an HTTP request;
callers hand in plain data (ORM rows work too, they are read duck-typed).

Usage:
    >>> from booking_core.booking import compute_total, is_available
    >>> from booking_core.booking import compute_fee, diff_and_record
"""

__version__ = "1.0.0"
