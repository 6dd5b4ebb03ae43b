from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..batches.model import Batch
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy from the member's own batch window."""

    def for_checkin(self, *, now: datetime, batch: Batch) -> AttendanceStrategy:
        if batch.is_running(now.time()):
            return PresentStrategy()
        return LateStrategy()
