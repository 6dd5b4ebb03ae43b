from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Optional, Union

from ..common.datetime_utils import days_between
from ..core.enums import LifecycleEventKind, MembershipStatus, PaymentState


@dataclass(frozen=True)
class Member:
    """Domain entity: a gym member and the derived membership fields.

    ``status``/``payment_state``/``coverage_end`` are only ever changed through
    the ledger, the freeze controller or the status engine.
    """

    member_id: int
    name: str
    phone: str
    email: Optional[str]
    batch_id: Optional[int]
    registered_on: Optional[date]
    status: MembershipStatus = MembershipStatus.PENDING
    payment_state: PaymentState = PaymentState.PENDING
    coverage_end: Optional[date] = None
    date_of_birth: Optional[date] = None
    last_payment_date: Optional[date] = None
    freeze_start: Optional[date] = None
    freeze_end: Optional[date] = None
    freeze_reason: Optional[str] = None
    is_active: bool = True

    def days_left(self, today: date) -> Optional[int]:
        if self.coverage_end is None:
            return None
        return days_between(today, self.coverage_end)

    def has_birthday(self, today: date) -> bool:
        dob = self.date_of_birth
        return dob is not None and (dob.month, dob.day) == (today.month, today.day)


# Lifecycle history: an append-only list of tagged events per member.


@dataclass(frozen=True)
class FreezeEvent:
    occurred_on: date
    prior_status: MembershipStatus
    coverage_end: Optional[date]
    reason: str
    kind: ClassVar[LifecycleEventKind] = LifecycleEventKind.FREEZE


@dataclass(frozen=True)
class UnfreezeEvent:
    occurred_on: date
    days_frozen: int
    extra_days: int
    coverage_end: Optional[date]
    new_coverage_end: date
    kind: ClassVar[LifecycleEventKind] = LifecycleEventKind.UNFREEZE


@dataclass(frozen=True)
class RenewalEvent:
    occurred_on: date
    payment_id: int
    coverage_end: Optional[date]
    new_coverage_end: date
    kind: ClassVar[LifecycleEventKind] = LifecycleEventKind.RENEWAL


@dataclass(frozen=True)
class RetractionEvent:
    occurred_on: date
    payment_id: int
    coverage_end: Optional[date]
    new_coverage_end: Optional[date]
    kind: ClassVar[LifecycleEventKind] = LifecycleEventKind.RETRACTION


LifecycleEvent = Union[FreezeEvent, UnfreezeEvent, RenewalEvent, RetractionEvent]
