from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..common.datetime_utils import format_clock, time_in_window, wraps_midnight


@dataclass(frozen=True)
class Batch:
    """Domain entity: a recurring daily training slot."""

    batch_id: int
    name: str
    start_time: time
    end_time: time
    capacity: int = 30
    is_active: bool = True

    @property
    def wraps_midnight(self) -> bool:
        return wraps_midnight(self.start_time, self.end_time)

    def is_running(self, at: time) -> bool:
        return time_in_window(at, self.start_time, self.end_time)

    @property
    def display_time(self) -> str:
        return f"{format_clock(self.start_time)} - {format_clock(self.end_time)}"
