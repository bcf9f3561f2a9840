"""Day-granularity date predicates and formatting.

Every function here accepts ISO date strings straight from the API (or
``date``/``datetime`` objects) and degrades to a safe default when the value
is missing or malformed: not overdue, ``None`` days remaining, not past, not
future.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Union

from dateutil.parser import isoparse

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, None]

MONTHS_ABBR = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

NOT_SET = "Not set"
INVALID_DATE = "Invalid date"


def parse_date(value: DateLike) -> date | None:
    """Return the calendar day of *value*, or ``None`` if absent/unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return isoparse(str(value).strip()).date()
    except (ValueError, TypeError, OverflowError):
        logger.debug("Unparseable date %r", value)
        return None


def is_past_date(value: DateLike, today: date | None = None) -> bool:
    """True when *value* falls strictly before *today*."""
    day = parse_date(value)
    if day is None:
        return False
    return day < (today or date.today())


def is_future_date(value: DateLike, today: date | None = None) -> bool:
    """True when *value* falls strictly after *today*."""
    day = parse_date(value)
    if day is None:
        return False
    return day > (today or date.today())


def is_overdue(
    due_date: DateLike, percent_done: float | None, today: date | None = None
) -> bool:
    """Return True if an unfinished task's due date has passed.

    A task at 100% is never overdue, and neither is one without a usable
    due date.
    """
    if parse_date(due_date) is None:
        return False
    if (percent_done or 0) == 100:
        return False
    return is_past_date(due_date, today)


def days_remaining(target_date: DateLike, today: date | None = None) -> int | None:
    """Signed number of days from *today* to *target_date* (negative if past)."""
    target = parse_date(target_date)
    if target is None:
        return None
    return (target - (today or date.today())).days


# -- formatting ---------------------------------------------------------------


def format_date(value: DateLike) -> str:
    """Format as ``"15 Jan 2024"`` using English month names."""
    if value is None or value == "":
        return NOT_SET
    day = parse_date(value)
    if day is None:
        return INVALID_DATE
    return f"{day.day:02d} {MONTHS_ABBR[day.month - 1]} {day.year}"


def format_date_range(start: DateLike, end: DateLike) -> str:
    return f"{format_date(start)} - {format_date(end)}"


def format_date_for_api(day: date) -> str:
    """Format as ``YYYY-MM-DD`` for API query parameters."""
    return day.strftime("%Y-%m-%d")
