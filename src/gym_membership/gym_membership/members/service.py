from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from loguru import logger

from ..batches.model import Batch
from ..batches.repository import BatchRepository
from ..common.clock import Clock
from ..common.validators import require_non_empty
from ..core.enums import MembershipStatus
from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..status.engine import StatusEngine
from .model import LifecycleEvent, Member
from .repository import MemberRepository

_REFRESHABLE = (MembershipStatus.ACTIVE, MembershipStatus.EXPIRING_SOON, MembershipStatus.EXPIRED)


class MemberService:
    """Use cases: registration, lookup and daily status maintenance."""

    def __init__(
        self,
        members: MemberRepository,
        batches: BatchRepository,
        clock: Clock,
        *,
        status_engine: Optional[StatusEngine] = None,
    ):
        self._members = members
        self._batches = batches
        self._clock = clock
        self._engine = status_engine or StatusEngine()

    def register(
        self,
        *,
        name: str,
        phone: str,
        email: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        batch_id: Optional[int] = None,
    ) -> Member:
        name = require_non_empty(name, "Name")
        phone = require_non_empty(phone, "Phone")

        if self._members.get_by_phone(phone):
            raise ConflictError("A member with this phone number already exists")
        if batch_id is not None:
            self._require_batch(batch_id)

        member_id = self._members.create(
            name=name,
            phone=phone,
            email=email.strip() if email else None,
            date_of_birth=date_of_birth,
            batch_id=batch_id,
            registered_on=self._clock.today(),
        )
        logger.info(f"registered member {member_id} ({name})")
        return self._members.get_by_id(member_id)

    def get(self, member_id: int) -> Member:
        member = self._members.get_by_id(member_id)
        if not member or not member.is_active:
            raise NotFoundError("Member not found")

        refreshed = self._engine.refresh(member, self._clock.today())
        if refreshed is not member:
            self._members.save_derived(refreshed)
        return refreshed

    def assign_batch(self, member_id: int, batch_id: int) -> Member:
        member = self.get(member_id)
        batch = self._require_batch(batch_id)
        if member.batch_id != batch.batch_id and self._members.count_current_in_batch(batch.batch_id) >= batch.capacity:
            raise BadRequestError("Batch is at full capacity")
        self._members.set_batch(member.member_id, batch_id)
        logger.info(f"member {member.member_id} assigned to batch {batch_id}")
        return self._members.get_by_id(member.member_id)

    def _require_batch(self, batch_id: int) -> Batch:
        batch = self._batches.get_by_id(batch_id)
        if not batch or not batch.is_active:
            raise NotFoundError("Batch not found")
        return batch

    def status_overview(self) -> dict[str, int]:
        counts = self._members.count_by_status()
        out = {status.value: counts.get(status, 0) for status in MembershipStatus}
        out["total"] = sum(counts.values())
        return out

    def refresh_all(self, today: Optional[date] = None) -> int:
        """Re-derive every non-sticky member's status; returns how many changed."""
        today = today or self._clock.today()
        changed = 0
        for member in self._members.list_by_status(_REFRESHABLE):
            refreshed = self._engine.refresh(member, today)
            if refreshed is not member:
                self._members.save_derived(refreshed)
                changed += 1
        logger.info(f"status refresh for {today}: {changed} member(s) changed")
        return changed

    def history(self, member_id: int) -> Sequence[LifecycleEvent]:
        self.get(member_id)
        return self._members.list_history(member_id)
