"""Pricing Calculator: nights and total price of a stay."""

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENTS = Decimal("0.01")
SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[date, datetime]


def compute_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    Number of nights between two dates, rounded up to whole days.

    Plain dates give an exact day count; datetimes count any partial day as a
    full night.

    Example:
        >>> compute_nights(date(2024, 1, 1), date(2024, 1, 4))
        3
    """
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        return math.ceil((check_out - check_in).total_seconds() / SECONDS_PER_DAY)
    if isinstance(check_in, datetime):
        check_in = check_in.date()
    if isinstance(check_out, datetime):
        check_out = check_out.date()
    return (check_out - check_in).days


def compute_total(nightly_rate: Union[Decimal, int, str], check_in: DateLike, check_out: DateLike) -> Decimal:
    """
    Total price of a stay: nights x nightly rate, rounded to cents.

    Example:
        >>> compute_total(Decimal("100"), date(2024, 1, 1), date(2024, 1, 4))
        Decimal('300.00')
    """
    nights = compute_nights(check_in, check_out)
    total = Decimal(str(nightly_rate)) * nights
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def outstanding_balance(total_amount: Decimal, paid_amount: Decimal) -> Decimal:
    """Amount still owed on a reservation. Negative when the guest overpaid."""
    return (Decimal(str(total_amount)) - Decimal(str(paid_amount))).quantize(CENTS)
