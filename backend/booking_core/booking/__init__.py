"""
booking_core/booking - booking lifecycle rules

- status: booking/room statuses and the transition table
- availability: overlap checker
- pricing: total price calculator
- cancellation: tiered cancellation fee policy
- audit: field-level modification diff
- validation: stay request validation
"""

from booking_core.booking.status import (
    BookingStatus,
    RoomStatus,
    BookingTrigger,
    UNBOOKABLE_ROOM_STATUSES,
    ACTIVE_STATUSES,
    FINAL_STATUSES,
    booking_state_machine,
    can_transition,
    next_status,
)
from booking_core.booking.availability import (
    ranges_overlap,
    conflicts_with,
    is_room_free,
    find_free_room,
    is_available,
)
from booking_core.booking.pricing import (
    round_money,
    count_nights,
    compute_total,
)
from booking_core.booking.cancellation import (
    CancellationTier,
    CancellationQuote,
    CANCELLATION_TIERS,
    days_until_check_in,
    fee_rate_for,
    compute_fee,
    allocate_refund,
)
from booking_core.booking.audit import (
    ExtraRef,
    BookingSnapshot,
    ModificationRecord,
    TrackedField,
    TRACKED_FIELDS,
    diff_fields,
    diff_and_record,
)
from booking_core.booking.validation import collect_stay_errors, validate_stay

__all__ = [
    # status
    "BookingStatus",
    "RoomStatus",
    "BookingTrigger",
    "UNBOOKABLE_ROOM_STATUSES",
    "ACTIVE_STATUSES",
    "FINAL_STATUSES",
    "booking_state_machine",
    "can_transition",
    "next_status",
    # availability
    "ranges_overlap",
    "conflicts_with",
    "is_room_free",
    "find_free_room",
    "is_available",
    # pricing
    "round_money",
    "count_nights",
    "compute_total",
    # cancellation
    "CancellationTier",
    "CancellationQuote",
    "CANCELLATION_TIERS",
    "days_until_check_in",
    "fee_rate_for",
    "compute_fee",
    "allocate_refund",
    # audit
    "ExtraRef",
    "BookingSnapshot",
    "ModificationRecord",
    "TrackedField",
    "TRACKED_FIELDS",
    "diff_fields",
    "diff_and_record",
    # validation
    "collect_stay_errors",
    "validate_stay",
]
