from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import time_in_window
from .model import Batch

_DAY_MINUTES = 24 * 60


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _to_time(minutes: int) -> time:
    minutes %= _DAY_MINUTES
    return time(minutes // 60, minutes % 60)


@dataclass(frozen=True)
class FacilitySchedule:
    """Opening hours derived from the active batches.

    Opening is the earliest batch start, closing the latest batch end, where a
    batch ending "before" it starts is taken to finish on the next day.
    """

    batches: Sequence[Batch]

    @property
    def has_batches(self) -> bool:
        return bool(self.batches)

    def _span(self) -> tuple[int, int]:
        opening = min(_minutes(b.start_time) for b in self.batches)
        closing = opening
        for b in self.batches:
            start = _minutes(b.start_time)
            end = _minutes(b.end_time)
            if end < start:
                end += _DAY_MINUTES
            closing = max(closing, end)
        return opening, closing

    @property
    def opening(self) -> Optional[time]:
        if not self.batches:
            return None
        return _to_time(self._span()[0])

    @property
    def closing(self) -> Optional[time]:
        if not self.batches:
            return None
        return _to_time(self._span()[1])

    def is_open(self, at: time) -> bool:
        if not self.batches:
            return False
        opening, closing = self._span()
        if closing - opening >= _DAY_MINUTES:
            return True
        return time_in_window(at, _to_time(opening), _to_time(closing))

    def next_opening(self, now: datetime) -> Optional[datetime]:
        opening = self.opening
        if opening is None:
            return None
        candidate = datetime.combine(now.date(), opening, tzinfo=now.tzinfo)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    def running(self, at: time) -> list[Batch]:
        return [b for b in self.batches if b.is_running(at)]

    def next_batch_start(self, now: datetime) -> Optional[tuple[Batch, datetime]]:
        """The batch that starts soonest after ``now`` (today or tomorrow)."""
        best: Optional[tuple[Batch, datetime]] = None
        for b in self.batches:
            candidate = datetime.combine(now.date(), b.start_time, tzinfo=now.tzinfo)
            if candidate <= now:
                candidate += timedelta(days=1)
            if best is None or candidate < best[1]:
                best = (b, candidate)
        return best
