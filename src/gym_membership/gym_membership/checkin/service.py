from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from loguru import logger

from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock
from ..common.validators import require_coordinate, require_non_empty
from ..core.enums import AttendanceStatus, MembershipStatus
from ..core.exceptions import DomainError, DuplicateAttendanceError
from ..core.settings import FacilitySettings
from .gates import CheckInContext, Gate, already_marked
from .model import BirthdayMessage, CheckInRequest, CheckInResult, ExpiryWarning, LateWarning


class SelfCheckInService:
    """Self check-in: run the admission gates, decide present/late, write the record."""

    def __init__(
        self,
        gates: Sequence[Gate],
        attendance: AttendanceRepository,
        clock: Clock,
        settings: FacilitySettings,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._gates = tuple(gates)
        self._attendance = attendance
        self._clock = clock
        self._settings = settings
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def check_in(self, request: CheckInRequest) -> CheckInResult:
        request = replace(
            request,
            phone=require_non_empty(request.phone, "phone"),
            email=require_non_empty(request.email, "email"),
            latitude=require_coordinate(request.latitude, "latitude", limit=90),
            longitude=require_coordinate(request.longitude, "longitude", limit=180),
        )

        ctx = CheckInContext(request=request, now=self._clock.now())
        for gate in self._gates:
            try:
                gate.check(ctx)
            except DomainError as exc:
                logger.info(f"self check-in rejected at {gate.name} gate ({type(exc).__name__}): {exc.message}")
                raise

        member, batch = ctx.member, ctx.batch
        decision = self._factory.for_checkin(now=ctx.now, batch=batch).decide_checkin(now=ctx.now, batch=batch)
        try:
            attendance_id = self._attendance.create(
                member_id=member.member_id,
                batch_id=batch.batch_id,
                attendance_date=ctx.today,
                status=decision.status,
                check_in_time=ctx.now,
                marked_by=None,
                note=decision.note,
            )
        except DuplicateAttendanceError:
            # Lost the race with a concurrent check-in for the same day.
            existing = self._attendance.get_for_member_and_date(member.member_id, ctx.today)
            logger.info(f"self check-in for member {member.member_id} lost a duplicate race")
            if existing:
                raise already_marked(existing)
            raise

        logger.info(
            f"member {member.member_id} checked in as {decision.status.value} "
            f"({ctx.distance_meters} m, batch {batch.name})"
        )
        return CheckInResult(
            attendance_id=attendance_id,
            member_id=member.member_id,
            member_name=member.name,
            status=decision.status,
            membership_status=member.status,
            coverage_end=member.coverage_end,
            batch_name=batch.name,
            batch_time=batch.display_time,
            distance_meters=ctx.distance_meters,
            check_in_time=ctx.now,
            trial_warning=ctx.trial,
            late_warning=self._late_warning(decision.status, batch),
            birthday_message=BirthdayMessage(member.name) if member.has_birthday(ctx.today) else None,
            expiry_warning=self._expiry_warning(member, ctx.today),
        )

    def _late_warning(self, status: AttendanceStatus, batch) -> Optional[LateWarning]:
        if status != AttendanceStatus.LATE:
            return None
        return LateWarning(
            batch_name=batch.name,
            batch_time=batch.display_time,
            contact_name=self._settings.escalation_contact_name,
            contact_phone=self._settings.escalation_contact_phone,
        )

    def _expiry_warning(self, member, today) -> Optional[ExpiryWarning]:
        if member.status == MembershipStatus.PENDING:
            return None
        days_left = member.days_left(today)
        if days_left is None or not 0 <= days_left <= self._settings.expiry_warning_days:
            return None
        return ExpiryWarning(days_left=days_left, expiry_date=member.coverage_end)
