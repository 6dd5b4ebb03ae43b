from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from loguru import logger

from ..batches.repository import BatchRepository
from ..core.enums import AttendanceStatus
from ..core.exceptions import BadRequestError, NotFoundError
from ..members.repository import MemberRepository
from ..status.engine import StatusEngine
from .model import AttendanceOverview, AttendanceRecord
from .repository import AttendanceRepository


@dataclass(frozen=True)
class MarkEntry:
    member_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    note: Optional[str] = None


class AttendanceService:
    """Use cases: admin marking and attendance statistics."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        members: MemberRepository,
        batches: BatchRepository,
        *,
        status_engine: Optional[StatusEngine] = None,
    ):
        self._attendance = attendance
        self._members = members
        self._batches = batches
        self._engine = status_engine or StatusEngine()

    def mark(
        self,
        *,
        batch_id: int,
        attendance_date: date,
        entries: Sequence[MarkEntry],
        marked_by: int,
    ) -> list[AttendanceRecord]:
        """Admin bulk marking. Members without a current paid membership are skipped."""
        if not self._batches.get_by_id(batch_id):
            raise NotFoundError("Batch not found")
        if not entries:
            raise BadRequestError("Attendance data is required")

        out: list[AttendanceRecord] = []
        for entry in entries:
            member = self._members.get_by_id(entry.member_id)
            if not member or not member.is_active:
                continue
            if not self._engine.refresh(member, attendance_date).status.is_current:
                logger.info(f"skipping member {member.member_id}: membership not current")
                continue

            existing = self._attendance.get_for_member_and_date(member.member_id, attendance_date)
            if existing:
                self._attendance.update_mark(
                    attendance_id=existing.attendance_id,
                    status=entry.status,
                    check_in_time=entry.check_in_time,
                    marked_by=marked_by,
                    note=entry.note,
                )
            else:
                self._attendance.create(
                    member_id=member.member_id,
                    batch_id=batch_id,
                    attendance_date=attendance_date,
                    status=entry.status,
                    check_in_time=entry.check_in_time,
                    marked_by=marked_by,
                    note=entry.note,
                )

            record = self._attendance.get_for_member_and_date(member.member_id, attendance_date)
            if record:
                out.append(record)
        return out

    def overview(self, *, start: date, end: date) -> AttendanceOverview:
        if end < start:
            raise BadRequestError("End date must not be before start date")
        counts = self._attendance.count_by_status(start_date=start, end_date=end)
        return AttendanceOverview(
            total=sum(counts.values()),
            present=counts.get(AttendanceStatus.PRESENT, 0),
            late=counts.get(AttendanceStatus.LATE, 0),
            absent=counts.get(AttendanceStatus.ABSENT, 0),
            excused=counts.get(AttendanceStatus.EXCUSED, 0),
        )

    def today_record(self, member_id: int, on: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_member_and_date(member_id, on)

    def history(self, member_id: int, *, limit: int = 30) -> Sequence[AttendanceRecord]:
        """Most recent records first."""
        member = self._members.get_by_id(member_id)
        if not member or not member.is_active:
            raise NotFoundError("Member not found")
        if not 1 <= limit <= 365:
            raise BadRequestError("limit must be between 1 and 365")
        return self._attendance.get_recent_for_member(member_id, limit)
