from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from loguru import logger

from ..common.clock import Clock
from ..core.constants import AUTO_ABSENT_NOTE
from ..core.enums import MembershipStatus
from ..members.repository import MemberRepository
from ..status.engine import StatusEngine
from .repository import AttendanceRepository


@dataclass(frozen=True)
class SweepResult:
    attendance_date: date
    marked_absent: int
    member_names: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        if self.error:
            return f"Auto-mark absent failed after {self.marked_absent} record(s): {self.error}"
        if self.marked_absent == 0:
            return "All members already marked"
        return f"Auto-marked {self.marked_absent} members as absent"


class AbsenceSweeper:
    """End-of-day back-fill of ``absent`` for members who never checked in.

    Idempotent: a repeat run recomputes the unmarked set and finds it empty.
    Safe to run concurrently; the store's (member, date) uniqueness decides.
    """

    def __init__(
        self,
        members: MemberRepository,
        attendance: AttendanceRepository,
        clock: Clock,
        *,
        status_engine: Optional[StatusEngine] = None,
    ):
        self._members = members
        self._attendance = attendance
        self._clock = clock
        self._engine = status_engine or StatusEngine()

    def run(self, on: Optional[date] = None) -> SweepResult:
        on = on or self._clock.today()
        try:
            candidates = self._members.list_by_status(
                (MembershipStatus.ACTIVE, MembershipStatus.EXPIRING_SOON), with_batch_only=True
            )
            eligible = [m for m in candidates if self._engine.refresh(m, on).status.is_current]

            already_marked = self._attendance.member_ids_for_date(on)
            unmarked = [m for m in eligible if m.member_id not in already_marked]
            logger.info(
                f"absence sweep {on}: {len(eligible)} eligible, {len(already_marked)} already marked, "
                f"{len(unmarked)} to mark"
            )
            if not unmarked:
                return SweepResult(attendance_date=on, marked_absent=0)

            inserted = set(
                self._attendance.bulk_create_absent(
                    attendance_date=on,
                    member_batches=[(m.member_id, m.batch_id) for m in unmarked],
                    note=AUTO_ABSENT_NOTE,
                )
            )
        except Exception as exc:
            logger.exception(f"absence sweep for {on} failed")
            return SweepResult(attendance_date=on, marked_absent=0, error=str(exc))

        # Rows lost to a concurrent writer are neither counted nor named.
        names = [m.name for m in unmarked if m.member_id in inserted]
        return SweepResult(attendance_date=on, marked_absent=len(names), member_names=names)
