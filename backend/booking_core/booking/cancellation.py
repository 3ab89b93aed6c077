"""
booking_core/booking/cancellation.py

Cancellation policy engine.

The fee depends on how many whole days remain before check-in:

    >= 30 days   0%   (free cancellation)
    7-29 days    20%
    1-6 days     50%
    0 or less    100% (no refund)

Days are measured from `now` to midnight of the check-in date and truncated
toward zero, so cancelling at 10:00 the day before check-in counts as 0 days.
When `now` is a plain date the difference is exact calendar days.

The engine only computes; recording the cancellation, moving the booking
to CANCELLED and booking the refunds on payments is the caller's job.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Union

from booking_core.booking.pricing import round_money, to_decimal
from booking_core.errors import PreconditionViolation


@dataclass(frozen=True)
class CancellationTier:
    """
    One row of the policy table.

    Attributes:
        min_days: Lowest days-before value in the tier; None means unbounded
        max_days: Highest days-before value in the tier; None means unbounded
        fee_rate: Share of the total price kept as fee
    """

    min_days: Optional[int]
    max_days: Optional[int]
    fee_rate: Decimal

    def matches(self, days_before: int) -> bool:
        if self.min_days is not None and days_before < self.min_days:
            return False
        if self.max_days is not None and days_before > self.max_days:
            return False
        return True

    def describe(self) -> str:
        """Human-readable timeframe, e.g. '7-29 days before check-in'."""
        if self.max_days is None:
            return f"{self.min_days} or more days before check-in"
        if self.min_days is None:
            return "on check-in day"
        return f"{self.min_days}-{self.max_days} days before check-in"


FREE_CANCELLATION_DAYS = 30

CANCELLATION_TIERS = (
    CancellationTier(min_days=FREE_CANCELLATION_DAYS, max_days=None, fee_rate=Decimal("0")),
    CancellationTier(min_days=7, max_days=FREE_CANCELLATION_DAYS - 1, fee_rate=Decimal("0.20")),
    CancellationTier(min_days=1, max_days=6, fee_rate=Decimal("0.50")),
    CancellationTier(min_days=None, max_days=0, fee_rate=Decimal("1.00")),
)


@dataclass(frozen=True)
class CancellationQuote:
    """Outcome of the policy: fee kept and amount refunded."""

    days_before: int
    fee_rate: Decimal
    fee: Decimal
    refund: Decimal
    tier: CancellationTier

    @property
    def is_free(self) -> bool:
        return self.fee == 0

    @property
    def timeframe(self) -> str:
        return self.tier.describe()


def days_until_check_in(check_in: date, now: Union[date, datetime]) -> int:
    """Whole days from `now` until check-in, truncated toward zero."""
    if isinstance(now, datetime):
        delta = datetime.combine(check_in, time.min, tzinfo=now.tzinfo) - now
        days = abs(delta).days
        return days if delta >= timedelta(0) else -days
    return (check_in - now).days


def tier_for(days_before: int) -> CancellationTier:
    for tier in CANCELLATION_TIERS:
        if tier.matches(days_before):
            return tier
    # the table is exhaustive
    raise AssertionError(f"No cancellation tier for {days_before} days")


def fee_rate_for(days_before: int) -> Decimal:
    return tier_for(days_before).fee_rate


def compute_fee(
    booking: Any,
    total_price: Any,
    now: Optional[Union[date, datetime]] = None,
) -> CancellationQuote:
    """
    Compute the cancellation fee and refund for a booking.

    Args:
        booking: Anything with a `check_in_date`
        total_price: The booking's total price; must be set
        now: Moment of cancellation, defaults to the current local time

    Returns:
        CancellationQuote with fee and refund rounded half-up to cents;
        refund is floored at zero

    Raises:
        PreconditionViolation: total price or check-in date is missing,
            or the total price is negative
    """
    if total_price is None:
        raise PreconditionViolation("Booking has no total price; cannot compute a cancellation fee",
                                    field="total_price")
    total = to_decimal(total_price, field="total_price")
    if total < 0:
        raise PreconditionViolation(f"Total price {total} is negative", field="total_price")

    check_in = getattr(booking, "check_in_date", None)
    if check_in is None:
        raise PreconditionViolation("Booking has no check-in date", field="check_in_date")

    days_before = days_until_check_in(check_in, now if now is not None else datetime.now())
    tier = tier_for(days_before)
    fee = round_money(total * tier.fee_rate)
    refund = max(round_money(total - fee), Decimal("0.00"))
    return CancellationQuote(
        days_before=days_before,
        fee_rate=tier.fee_rate,
        fee=fee,
        refund=refund,
        tier=tier,
    )


def allocate_refund(refund: Any, paid_amounts: Sequence[Any]) -> List[Decimal]:
    """
    Spread a refund over the payments that were collected, in order.

    Each payment gives back at most its own amount, so the refunds sum to
    min(refund, total paid). Nothing is refunded when nothing was paid.

    Example:
        >>> allocate_refund(Decimal("150.00"), [Decimal("100.00"), Decimal("200.00")])
        [Decimal('100.00'), Decimal('50.00')]
    """
    remaining = max(to_decimal(refund, field="refund"), Decimal("0"))
    shares = []
    for amount in paid_amounts:
        share = min(remaining, to_decimal(amount, field="amount"))
        shares.append(round_money(share))
        remaining -= share
    return shares


__all__ = [
    "CancellationTier",
    "CancellationQuote",
    "CANCELLATION_TIERS",
    "FREE_CANCELLATION_DAYS",
    "days_until_check_in",
    "tier_for",
    "fee_rate_for",
    "compute_fee",
    "allocate_refund",
]
