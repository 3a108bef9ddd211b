"""
Calendar date helpers.

This is the date-parsing boundary of the engine: every ISO string that enters
a scheduling function goes through parse_date(), and malformed values raise
InvalidDateError here rather than deep inside the graph algorithms.
"""

from datetime import date, datetime, timedelta
from typing import Union

from planboard.exceptions import InvalidDateError

DateLike = Union[date, str]


def parse_date(value: DateLike) -> date:
    """Parse an ISO YYYY-MM-DD string (or pass a date through unchanged)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidDateError(value) from None
    raise InvalidDateError(value)


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def add_days(value: DateLike, days: int) -> date:
    return parse_date(value) + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed number of calendar days from start to end (end - start)."""
    return (parse_date(end) - parse_date(start)).days


def calculate_duration(start_date: DateLike, end_date: DateLike) -> int:
    """
    Duration between two dates in calendar days, both ends inclusive.

    Never returns less than 1, so an end date before the start date
    yields a one-day task.
    """
    return max(1, days_between(start_date, end_date) + 1)
