from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store. Must enforce uniqueness of (member_id, attendance_date)."""

    def get_for_member_and_date(self, member_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        member_id: int,
        batch_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[datetime] = None,
        marked_by: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Insert one record. Raises ``DuplicateAttendanceError`` if the day is already marked."""

        raise NotImplementedError

    def update_mark(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        check_in_time: Optional[datetime],
        marked_by: Optional[int],
        note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def bulk_create_absent(
        self,
        *,
        attendance_date: date,
        member_batches: Sequence[tuple[int, int]],
        note: Optional[str] = None,
    ) -> list[int]:
        """Insert ``absent`` rows for (member_id, batch_id) pairs.

        Rows that would collide with an existing (member, date) record are
        skipped by the store. Returns the member ids actually inserted.
        """

        raise NotImplementedError

    def member_ids_for_date(self, attendance_date: date) -> set[int]:
        raise NotImplementedError

    def count_by_status(self, *, start_date: date, end_date: date) -> dict[AttendanceStatus, int]:
        raise NotImplementedError

    def get_recent_for_member(self, member_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
