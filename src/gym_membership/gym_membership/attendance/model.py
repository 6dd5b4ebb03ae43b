from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one member's attendance on one calendar day.

    ``marked_by`` is None for self check-ins and system-generated absences.
    """

    attendance_id: int
    member_id: int
    batch_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    marked_by: Optional[int] = None
    note: Optional[str] = None

    @property
    def self_marked(self) -> bool:
        return self.marked_by is None


@dataclass(frozen=True)
class AttendanceOverview:
    """Read-model for the attendance stats endpoint."""

    total: int
    present: int
    late: int
    absent: int
    excused: int

    @property
    def attendance_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.present / self.total * 100, 2)
