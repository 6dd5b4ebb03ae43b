from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import BadRequestError
from .datetime_utils import parse_iso_date


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise BadRequestError(f"{field_name} is required")
    return value.strip()


def require_positive(value, field_name: str):
    try:
        ok = value is not None and value > 0
    except TypeError:
        ok = False
    if not ok:
        raise BadRequestError(f"{field_name} must be positive")
    return value


def require_coordinate(value, field_name: str, *, limit: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequestError(f"{field_name} is not a valid coordinate")
    if not -limit <= number <= limit:
        raise BadRequestError(f"{field_name} is out of range")
    return number


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise BadRequestError(f"{field_name} must be a date in YYYY-MM-DD format")


def parse_int(value, field_name: str, *, default: Optional[int] = None) -> int:
    if value in (None, "") and default is not None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError(f"{field_name} must be a whole number")


def parse_clock_time(value, field_name: str) -> time:
    if isinstance(value, time):
        return value
    text = str(value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise BadRequestError(f"{field_name} must be a time in HH:MM format")
