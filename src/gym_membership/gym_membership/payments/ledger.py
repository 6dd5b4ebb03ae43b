"""Pure billing-period arithmetic.

Kept free of any store access so period boundaries, coverage recomputation
and receipt numbers can be computed (and tested) without a database.
"""

from __future__ import annotations

import random
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import add_calendar_months
from ..core.constants import RECEIPT_PREFIX
from .model import BillingPeriod


def effective_start(*, coverage_end: Optional[date], today: date, explicit_start: Optional[date] = None) -> date:
    """Seamless renewal when coverage is still running, else the requested (or current) date."""
    if coverage_end is not None and coverage_end > today:
        return coverage_end
    return explicit_start or today


def period_end(start: date, duration_months: int) -> date:
    return add_calendar_months(start, duration_months)


def recompute_coverage(periods: Iterable[BillingPeriod]) -> Optional[date]:
    """Coverage end derived from scratch from the surviving active periods.

    The earliest start plus the sum of all durations. The result depends only
    on the set of periods, never on the order they were recorded or retracted.
    """
    active = sorted((p for p in periods if p.is_active), key=lambda p: (p.period_start, p.payment_id))
    if not active:
        return None

    total_months = sum(int(p.duration_months) for p in active)
    return add_calendar_months(active[0].period_start, total_months)


def generate_receipt_number(on: date, *, rng: Optional[random.Random] = None) -> str:
    """``NSF`` + ``YYYYMMDD`` + a 3-digit random suffix."""
    suffix = (rng or random).randrange(1000)
    return f"{RECEIPT_PREFIX}{on:%Y%m%d}{suffix:03d}"
