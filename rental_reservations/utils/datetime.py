"""UTC datetime and stay-night utilities."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """
    Yield every night of a stay, i.e. each day in the half-open range [check_in, check_out).

    Example:
        >>> list(iter_nights(date(2024, 1, 1), date(2024, 1, 3)))
        [datetime.date(2024, 1, 1), datetime.date(2024, 1, 2)]
    """
    day = check_in
    while day < check_out:
        yield day
        day += timedelta(days=1)
