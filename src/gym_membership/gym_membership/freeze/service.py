from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from loguru import logger

from ..common.clock import Clock
from ..common.datetime_utils import add_days, days_between
from ..common.validators import require_non_empty
from ..core.enums import LifecycleEventKind, MembershipStatus
from ..core.exceptions import BadRequestError, InvalidStateError, NotFoundError
from ..database.unit_of_work import UnitOfWork
from ..members.model import FreezeEvent, Member, UnfreezeEvent
from ..members.repository import MemberRepository
from ..status.engine import StatusEngine


class FreezeController:
    """Pause and resume a membership without losing paid-for days.

    Freezing leaves ``coverage_end`` alone and records it in a freeze history
    entry; unfreezing restores that date pushed forward by the days spent
    frozen (plus any goodwill extension).
    """

    def __init__(
        self,
        members: MemberRepository,
        uow: UnitOfWork,
        clock: Clock,
        *,
        status_engine: Optional[StatusEngine] = None,
    ):
        self._members = members
        self._uow = uow
        self._clock = clock
        self._engine = status_engine or StatusEngine()

    def _load(self, member_id: int) -> Member:
        member = self._members.get_for_update(member_id)
        if not member or not member.is_active:
            raise NotFoundError("Member not found")
        return member

    def freeze(
        self,
        member_id: int,
        *,
        reason: str,
        start_date: Optional[date] = None,
        expected_duration_days: Optional[int] = None,
    ) -> Member:
        reason = require_non_empty(reason, "Freeze reason")
        if expected_duration_days is not None and int(expected_duration_days) < 1:
            raise BadRequestError("Expected duration must be positive")

        today = self._clock.today()

        with self._uow.transaction():
            member = self._engine.refresh(self._load(member_id), today)
            if not member.status.is_current:
                raise InvalidStateError(
                    "Can only freeze active memberships", details={"status": member.status.value}
                )

            freeze_start = start_date or today
            frozen = replace(
                member,
                status=MembershipStatus.FROZEN,
                freeze_start=freeze_start,
                freeze_end=add_days(freeze_start, expected_duration_days) if expected_duration_days else None,
                freeze_reason=reason,
            )

            self._members.save_derived(frozen)
            self._members.append_history(
                member.member_id,
                FreezeEvent(
                    occurred_on=freeze_start,
                    prior_status=member.status,
                    coverage_end=member.coverage_end,
                    reason=reason,
                ),
            )

        logger.info(f"member {member.member_id} frozen from {freeze_start} (was {member.status.value})")
        return frozen

    def unfreeze(self, member_id: int, *, extra_days: int = 0) -> Member:
        if int(extra_days) < 0:
            raise BadRequestError("Extension days must be non-negative")

        today = self._clock.today()

        with self._uow.transaction():
            member = self._load(member_id)
            if member.status != MembershipStatus.FROZEN:
                raise InvalidStateError("Member is not frozen", details={"status": member.status.value})

            event = self._members.latest_history(member.member_id, LifecycleEventKind.FREEZE)
            if not isinstance(event, FreezeEvent) or event.coverage_end is None:
                raise InvalidStateError("No freeze record with a coverage end-date to restore")

            # A freeze scheduled to start later has not used up any days yet.
            days_frozen = max(0, days_between(member.freeze_start or event.occurred_on, today))
            new_coverage_end = add_days(event.coverage_end, days_frozen + int(extra_days))

            result = self._engine.derive(
                coverage_end=new_coverage_end,
                payment_state=member.payment_state,
                current=event.prior_status,
                today=today,
            )
            resumed = replace(
                member,
                status=result.status,
                payment_state=result.payment_state,
                coverage_end=new_coverage_end,
                freeze_end=today,
            )

            self._members.save_derived(resumed)
            self._members.append_history(
                member.member_id,
                UnfreezeEvent(
                    occurred_on=today,
                    days_frozen=days_frozen,
                    extra_days=int(extra_days),
                    coverage_end=event.coverage_end,
                    new_coverage_end=new_coverage_end,
                ),
            )

        logger.info(
            f"member {member.member_id} unfrozen after {days_frozen} day(s): "
            f"coverage_end={new_coverage_end} status={resumed.status.value}"
        )
        return resumed
