"""
booking_core/booking/audit.py

Modification audit recorder - diffs a booking before and after an edit and
produces one record per changed field.

Tracked fields are declared in TRACKED_FIELDS as (name, extractor, formatter)
entries; tracking another field means adding an entry, not a branch.

All records from one diff share the same timestamp and actor so a history
view can group them into "what changed in this edit".
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, FrozenSet, List, Optional, Tuple

from booking_core.booking.pricing import round_money, to_decimal

DATE_FORMAT = "%d.%m.%Y"
NO_EXTRAS = "none"
MISSING_VALUE = "N/A"


@dataclass(frozen=True)
class ExtraRef:
    """An extra service as seen by the audit: compared by id, shown by name."""

    id: int
    name: str = field(compare=False)


@dataclass(frozen=True)
class BookingSnapshot:
    """Immutable copy of a booking's mutable fields."""

    booking_id: Optional[int]
    check_in_date: Optional[date]
    check_out_date: Optional[date]
    guests: Optional[int]
    total_price: Optional[Decimal]
    extras: FrozenSet[ExtraRef] = frozenset()

    @classmethod
    def capture(cls, booking: Any) -> "BookingSnapshot":
        """
        Snapshot any booking-like object.

        Reads `id`, `check_in_date`, `check_out_date`, `guests`,
        `total_price` and `extras` (objects with `id` and `name`).
        """
        return cls(
            booking_id=getattr(booking, "id", None),
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
            guests=booking.guests,
            total_price=booking.total_price,
            extras=frozenset(ExtraRef(e.id, e.name) for e in (booking.extras or ())),
        )


@dataclass(frozen=True)
class ModificationRecord:
    """One changed field of one edit. Append-only."""

    booking_id: Optional[int]
    modified_at: datetime
    field_changed: str
    old_value: str
    new_value: str
    reason: Optional[str] = None
    actor_id: Optional[int] = None


@dataclass(frozen=True)
class TrackedField:
    """
    Declarative description of an audited field.

    Attributes:
        name: Value stored in ModificationRecord.field_changed
        extractor: Snapshot -> comparable value
        formatter: Comparable value -> display string
    """

    name: str
    extractor: Callable[[BookingSnapshot], Any]
    formatter: Callable[[Any], str]


def format_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value is not None else MISSING_VALUE


def format_money(value: Any) -> str:
    if value is None:
        return MISSING_VALUE
    return str(round_money(to_decimal(value)))


def format_plain(value: Any) -> str:
    return str(value) if value is not None else MISSING_VALUE


def format_extras(value: FrozenSet[ExtraRef]) -> str:
    if not value:
        return NO_EXTRAS
    return ", ".join(sorted(e.name for e in value))


def _money_key(value: Any) -> Optional[Decimal]:
    return round_money(to_decimal(value)) if value is not None else None


TRACKED_FIELDS: Tuple[TrackedField, ...] = (
    TrackedField("check_in_date", lambda s: s.check_in_date, format_date),
    TrackedField("check_out_date", lambda s: s.check_out_date, format_date),
    TrackedField("guests", lambda s: s.guests, format_plain),
    TrackedField("total_price", lambda s: _money_key(s.total_price), format_money),
    TrackedField("extras", lambda s: s.extras, format_extras),
)


def diff_fields(
    before: BookingSnapshot,
    after: BookingSnapshot,
    fields: Tuple[TrackedField, ...] = TRACKED_FIELDS,
) -> List[Tuple[str, str, str]]:
    """(field, old, new) for every tracked field whose value differs."""
    changes = []
    for tracked in fields:
        old = tracked.extractor(before)
        new = tracked.extractor(after)
        if old != new:
            changes.append((tracked.name, tracked.formatter(old), tracked.formatter(new)))
    return changes


def diff_and_record(
    before: BookingSnapshot,
    after: Any,
    actor_id: Optional[int],
    timestamp: datetime,
    reason: Optional[str] = None,
    fields: Tuple[TrackedField, ...] = TRACKED_FIELDS,
) -> List[ModificationRecord]:
    """
    Compare a pre-edit snapshot with the post-edit booking.

    Args:
        before: Snapshot taken before the edit was applied
        after: The edited booking, or a snapshot of it
        actor_id: Acting user; None for guest self-service
        timestamp: Moment of the edit, shared by all records
        reason: Optional free-text reason

    Returns:
        One ModificationRecord per changed field; empty for a no-op save.
        Nothing is mutated.
    """
    after_snapshot = after if isinstance(after, BookingSnapshot) else BookingSnapshot.capture(after)
    booking_id = after_snapshot.booking_id if after_snapshot.booking_id is not None else before.booking_id
    return [
        ModificationRecord(
            booking_id=booking_id,
            modified_at=timestamp,
            field_changed=name,
            old_value=old,
            new_value=new,
            reason=reason,
            actor_id=actor_id,
        )
        for name, old, new in diff_fields(before, after_snapshot, fields)
    ]


__all__ = [
    "DATE_FORMAT",
    "NO_EXTRAS",
    "MISSING_VALUE",
    "ExtraRef",
    "BookingSnapshot",
    "ModificationRecord",
    "TrackedField",
    "TRACKED_FIELDS",
    "format_date",
    "format_money",
    "format_plain",
    "format_extras",
    "diff_fields",
    "diff_and_record",
]
