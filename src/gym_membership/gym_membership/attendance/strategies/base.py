from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...batches.model import Batch
from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a self check-in's status is decided."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, batch: Batch) -> StatusDecision:
        raise NotImplementedError
