from __future__ import annotations

from datetime import datetime

from ...batches.model import Batch
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in while some other batch is running."""

    def decide_checkin(self, *, now: datetime, batch: Batch) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            note=f"Checked in at {now:%H:%M} outside own batch {batch.name}",
        )
