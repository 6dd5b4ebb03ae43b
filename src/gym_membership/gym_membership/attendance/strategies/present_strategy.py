from __future__ import annotations

from datetime import datetime

from ...batches.model import Batch
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Check-in inside the member's own batch window."""

    def decide_checkin(self, *, now: datetime, batch: Batch) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
