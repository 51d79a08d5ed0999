"""Business-day arithmetic.

A business day is Monday through Friday. No holiday calendar is applied.
"""

from datetime import date, timedelta

from beartype import beartype


@beartype
def is_business_day(day: date) -> bool:
    """Check whether ``day`` falls on a weekday."""
    return day.weekday() < 5


@beartype
def add_business_days(start: date, days: int) -> date:
    """Advance ``days`` business days from ``start``, one day at a time.

    The start day itself is never counted: Friday + 1 is the next Monday.
    """
    if days < 0:
        raise ValueError("days must be non-negative")
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if is_business_day(current):
            remaining -= 1
    return current


@beartype
def business_days_between(start: date, end: date) -> int:
    """Signed count of business days in ``(start, end]``.

    Negative when ``end`` precedes ``start``, so an overdue deadline yields
    a negative remainder.
    """
    if end == start:
        return 0
    sign = 1
    if end < start:
        start, end = end, start
        sign = -1
    count = 0
    current = start
    while current < end:
        current += timedelta(days=1)
        if is_business_day(current):
            count += 1
    return sign * count
