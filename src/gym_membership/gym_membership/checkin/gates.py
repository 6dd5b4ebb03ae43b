"""Ordered admission gates for self check-in.

Each gate inspects the shared context and either raises a typed rejection or
records what later gates rely on. Gates never write to a store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, ClassVar, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..batches.model import Batch
from ..batches.repository import BatchRepository
from ..batches.schedule import FacilitySchedule
from ..common.datetime_utils import days_between, format_clock
from ..common.geo import GeoPoint, haversine_meters
from ..core.enums import MembershipStatus
from ..core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..core.settings import FacilitySettings
from ..members.model import Member
from ..members.repository import MemberRepository
from ..status.engine import StatusEngine
from .model import CheckInRequest, TrialWarning


@dataclass
class CheckInContext:
    request: CheckInRequest
    now: datetime
    member: Optional[Member] = None
    trial: Optional[TrialWarning] = None
    distance_meters: Optional[float] = None
    batch: Optional[Batch] = None
    schedule: Optional[FacilitySchedule] = None
    running: list[Batch] = field(default_factory=list)

    @property
    def today(self) -> date:
        return self.now.date()


class Gate(ABC):
    name: ClassVar[str]

    @abstractmethod
    def check(self, ctx: CheckInContext) -> None:
        raise NotImplementedError


class IdentityGate(Gate):
    name = "identity"

    def __init__(self, members: MemberRepository):
        self._members = members

    def check(self, ctx: CheckInContext) -> None:
        member = self._members.find_for_check_in(phone=ctx.request.phone, email=ctx.request.email)
        if not member:
            raise NotFoundError("Member not found. Please check your phone number and email.")
        ctx.member = member


class MembershipGate(Gate):
    name = "membership"

    def __init__(self, engine: StatusEngine):
        self._engine = engine

    def check(self, ctx: CheckInContext) -> None:
        member = self._engine.refresh(ctx.member, ctx.today)
        ctx.member = member

        if member.status == MembershipStatus.EXPIRED:
            ended = member.coverage_end
            when = f" on {ended:%d %b %Y}" if ended else ""
            raise ForbiddenError(
                f"Your membership expired{when}. Please renew your membership to continue.",
                details={"status": member.status.value, "endDate": ended.isoformat() if ended else None},
            )
        if member.status == MembershipStatus.FROZEN:
            raise ForbiddenError(
                "Your membership is currently frozen. Please contact the front desk to resume it.",
                details={"status": member.status.value},
            )
        if not (member.status.is_current or member.status == MembershipStatus.PENDING):
            raise ForbiddenError(
                "Your membership is not active. Please renew your membership to continue.",
                details={"status": member.status.value},
            )


class TrialGate(Gate):
    name = "trial"

    def __init__(self, trial_days: int):
        self._trial_days = int(trial_days)

    def check(self, ctx: CheckInContext) -> None:
        member = ctx.member
        if member.status != MembershipStatus.PENDING:
            return

        # Registration day counts as day 1.
        days_passed = days_between(member.registered_on or ctx.today, ctx.today) + 1
        if days_passed > self._trial_days:
            raise ForbiddenError(
                f"Your {self._trial_days}-day free trial period has ended. "
                "Please complete your payment to continue using the gym.",
                details={"daysPassed": days_passed, "trialDays": self._trial_days},
            )
        ctx.trial = TrialWarning(
            total_trial_days=self._trial_days,
            days_passed=days_passed,
            days_remaining=self._trial_days - days_passed,
        )


class GeofenceGate(Gate):
    name = "geofence"

    def __init__(
        self,
        facility: GeoPoint,
        radius_meters: float,
        *,
        distance_fn: Callable[[GeoPoint, GeoPoint], float] = haversine_meters,
    ):
        self._facility = facility
        self._radius = float(radius_meters)
        self._distance_fn = distance_fn

    def check(self, ctx: CheckInContext) -> None:
        here = GeoPoint(ctx.request.latitude, ctx.request.longitude)
        # Centimeter precision; GPS noise is far above it.
        distance = round(self._distance_fn(here, self._facility), 2)
        ctx.distance_meters = distance

        if distance > self._radius:
            raise ForbiddenError(
                f"You are {round(distance)} meters away from the gym. "
                f"Please be within {round(self._radius)} meters to mark attendance.",
                details={"distance": round(distance), "radius": self._radius},
            )


class BatchAssignmentGate(Gate):
    name = "batch_assignment"

    def __init__(self, batches: BatchRepository):
        self._batches = batches

    def check(self, ctx: CheckInContext) -> None:
        if ctx.member.batch_id is None:
            raise BadRequestError("No batch assigned. Please contact admin to assign a batch.")

        batch = self._batches.get_by_id(ctx.member.batch_id)
        if not batch or not batch.is_active:
            raise BadRequestError("Your assigned batch is no longer available. Please contact admin.")
        ctx.batch = batch


class FacilityHoursGate(Gate):
    name = "facility_hours"

    def __init__(self, batches: BatchRepository):
        self._batches = batches

    def check(self, ctx: CheckInContext) -> None:
        schedule = FacilitySchedule(tuple(self._batches.list_active()))
        ctx.schedule = schedule

        if not schedule.has_batches:
            raise ForbiddenError("The gym has no active batches right now.")

        if not schedule.is_open(ctx.now.time()):
            next_opening = schedule.next_opening(ctx.now)
            raise ForbiddenError(
                f"The gym is closed. Opening hours: {format_clock(schedule.opening)} - "
                f"{format_clock(schedule.closing)}. Next opening at {next_opening:%d %b %I:%M %p}.",
                details={
                    "opening": schedule.opening.isoformat(),
                    "closing": schedule.closing.isoformat(),
                    "nextOpening": next_opening.isoformat(),
                },
            )


class BatchRunningGate(Gate):
    name = "batch_running"

    def check(self, ctx: CheckInContext) -> None:
        running = ctx.schedule.running(ctx.now.time())
        ctx.running = running
        if running:
            return

        upcoming = ctx.schedule.next_batch_start(ctx.now)
        details = {}
        message = "No batch is running right now."
        if upcoming:
            batch, starts_at = upcoming
            message += f" Next batch: {batch.name} at {starts_at:%I:%M %p}."
            details = {"nextBatch": batch.name, "nextBatchStart": starts_at.isoformat()}
        raise ForbiddenError(message, details=details)


class DuplicateGate(Gate):
    name = "duplicate"

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def check(self, ctx: CheckInContext) -> None:
        existing = self._attendance.get_for_member_and_date(ctx.member.member_id, ctx.today)
        if existing:
            raise already_marked(existing)


def already_marked(existing) -> ConflictError:
    return ConflictError(
        "Attendance already marked for today",
        details={
            "status": existing.status.value,
            "checkInTime": existing.check_in_time.isoformat() if existing.check_in_time else None,
            "markedBy": "self" if existing.marked_by is None else existing.marked_by,
        },
    )


def default_gates(
    *,
    members: MemberRepository,
    batches: BatchRepository,
    attendance: AttendanceRepository,
    engine: StatusEngine,
    settings: FacilitySettings,
) -> Sequence[Gate]:
    """Gates in evaluation order. Later gates assume what earlier ones established."""
    return (
        IdentityGate(members),
        MembershipGate(engine),
        TrialGate(settings.trial_days),
        GeofenceGate(settings.location, settings.geofence_radius_meters),
        BatchAssignmentGate(batches),
        FacilityHoursGate(batches),
        BatchRunningGate(),
        DuplicateGate(attendance),
    )
