from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from ..common.datetime_utils import days_between
from ..core.constants import EXPIRY_WARNING_DAYS
from ..core.enums import MembershipStatus, PaymentState
from ..members.model import Member


@dataclass(frozen=True)
class Classification:
    status: MembershipStatus
    payment_state: PaymentState


class StatusEngine:
    """Derives membership status from the coverage end-date.

    Pure: reads a member, returns a classification. Callers decide whether to
    persist it. Run after every ledger/freeze mutation and before any status
    read that gates a business decision.
    """

    def __init__(self, *, warning_days: int = EXPIRY_WARNING_DAYS):
        self._warning_days = int(warning_days)

    @property
    def warning_days(self) -> int:
        return self._warning_days

    def derive(
        self,
        *,
        coverage_end: date,
        payment_state: PaymentState,
        current: MembershipStatus,
        today: date,
    ) -> Classification:
        """Threshold rule on its own, without the sticky-status guard."""
        days_left = days_between(today, coverage_end)

        if days_left < 0:
            return Classification(MembershipStatus.EXPIRED, PaymentState.OVERDUE)
        if days_left <= self._warning_days:
            return Classification(MembershipStatus.EXPIRING_SOON, payment_state)
        if payment_state == PaymentState.PAID:
            return Classification(MembershipStatus.ACTIVE, PaymentState.PAID)
        return Classification(current, payment_state)

    def classify(self, member: Member, today: date) -> Classification:
        if member.status.is_sticky or member.coverage_end is None:
            return Classification(member.status, member.payment_state)

        return self.derive(
            coverage_end=member.coverage_end,
            payment_state=member.payment_state,
            current=member.status,
            today=today,
        )

    def refresh(self, member: Member, today: date) -> Member:
        """Return ``member`` with its derived fields re-classified."""
        result = self.classify(member, today)
        if (result.status, result.payment_state) == (member.status, member.payment_state):
            return member
        return replace(member, status=result.status, payment_state=result.payment_state)
