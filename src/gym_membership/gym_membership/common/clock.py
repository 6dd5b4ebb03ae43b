from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE


class Clock(Protocol):
    """Source of "now" in the facility's civil calendar.

    All date arithmetic goes through a clock rather than the host machine's
    local time, since the host and the facility may sit in different zones.
    """

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class FacilityClock:
    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self._tz = ZoneInfo(timezone)

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()


@dataclass
class FixedClock:
    """Clock pinned to a given instant (tests, scripted back-fills)."""

    current: datetime

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def set(self, value: datetime) -> None:
        self.current = value
