from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def add_calendar_months(start: date, months: int) -> date:
    """Shift ``start`` by whole calendar months.

    The day is clamped to the last valid day of the target month, so
    31 Jan + 1 month is 28 Feb (29 Feb in leap years).
    """
    month_index = start.month - 1 + int(months)
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def days_between(start: date, end: date) -> int:
    """Whole civil days from ``start`` to ``end`` (negative when end is earlier)."""
    return (end - start).days


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=int(days))


def wraps_midnight(start: time, end: time) -> bool:
    return end < start


def time_in_window(now: time, start: time, end: time) -> bool:
    """Inclusive containment check for a time-of-day window.

    A window whose end is earlier than its start runs past midnight
    (e.g. 22:00-02:00 contains 23:30 and 01:15).
    """
    if wraps_midnight(start, end):
        return now >= start or now <= end
    return start <= now <= end


def format_clock(value: time) -> str:
    """12-hour display used in member-facing messages (e.g. ``06:30 AM``)."""
    return value.strftime("%I:%M %p")
