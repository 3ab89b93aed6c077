"""
booking_core/booking/pricing.py

Pricing calculator.

    total = nightly_rate * nights + sum(extra prices)

Per-person extras are multiplied by the guest count. Amounts are summed at
full precision and rounded half-up to cents once, on the total.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from booking_core.errors import PreconditionViolation

CENT = Decimal("0.01")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Coerce int/float/str/Decimal to Decimal; floats go through str()."""
    if value is None:
        raise PreconditionViolation(f"{field} is not set", field=field)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def count_nights(check_in: Optional[date], check_out: Optional[date]) -> int:
    """Whole nights between the two dates; must be at least one."""
    if check_in is None or check_out is None:
        raise PreconditionViolation("Stay dates are not set", field="check_in_date" if check_in is None else "check_out_date")
    nights = (check_out - check_in).days
    if nights < 1:
        raise PreconditionViolation(
            f"Check-out {check_out} must be after check-in {check_in}", field="check_out_date"
        )
    return nights


def extra_price(extra: Any, guests: int = 1) -> Decimal:
    """Price of one selected extra for a booking of `guests` people."""
    price = to_decimal(extra.price, field="extra.price")
    if getattr(extra, "per_person", False):
        return price * max(guests or 1, 1)
    return price


def compute_total(
    nightly_rate: Any,
    check_in: date,
    check_out: date,
    selected_extras: Iterable[Any] = (),
    guests: int = 1,
) -> Decimal:
    """
    Total price of a stay.

    Args:
        nightly_rate: Category rate per night
        check_in: Check-in date
        check_out: Check-out date, strictly after check_in
        selected_extras: Objects with `price` and optionally `per_person`
        guests: Guest count, used only by per-person extras

    Returns:
        Total rounded half-up to two decimals

    Raises:
        PreconditionViolation: missing rate, dates or extra price
    """
    rate = to_decimal(nightly_rate, field="nightly_rate")
    nights = count_nights(check_in, check_out)
    extras_total = sum((extra_price(e, guests) for e in selected_extras), Decimal("0"))
    return round_money(rate * nights + extras_total)


__all__ = [
    "CENT",
    "to_decimal",
    "round_money",
    "count_nights",
    "extra_price",
    "compute_total",
]
