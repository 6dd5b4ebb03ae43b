from __future__ import annotations

import random
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from loguru import logger

from ..common.clock import Clock
from ..common.validators import require_positive
from ..core.constants import ALLOWED_DURATIONS_MONTHS, RECEIPT_ATTEMPTS
from ..core.enums import MembershipStatus, PaymentMethod, PaymentState
from ..core.exceptions import BadRequestError, DuplicateReceiptError, InvalidStateError, NotFoundError
from ..database.unit_of_work import UnitOfWork
from ..members.model import Member, RenewalEvent, RetractionEvent
from ..members.repository import MemberRepository
from ..status.engine import StatusEngine
from .ledger import effective_start, generate_receipt_number, period_end, recompute_coverage
from .model import BillingPeriod, PaymentOverview
from .repository import PaymentRepository


class PaymentLedger:
    """Use cases: record and retract billing periods.

    Every mutation reads the member row locked, computes the new derived
    fields in memory and writes them inside one transaction, so a failure
    leaves ``coverage_end``/``status``/``payment_state`` untouched.
    """

    def __init__(
        self,
        members: MemberRepository,
        payments: PaymentRepository,
        uow: UnitOfWork,
        clock: Clock,
        *,
        status_engine: Optional[StatusEngine] = None,
        rng: Optional[random.Random] = None,
    ):
        self._members = members
        self._payments = payments
        self._uow = uow
        self._clock = clock
        self._engine = status_engine or StatusEngine()
        self._rng = rng

    @staticmethod
    def _parse_amount(amount) -> Decimal:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            raise BadRequestError("Valid amount is required")
        if not value.is_finite():
            raise BadRequestError("Valid amount is required")
        return require_positive(value, "Amount")

    @staticmethod
    def _parse_method(method) -> PaymentMethod:
        try:
            return PaymentMethod(method)
        except ValueError:
            raise BadRequestError("Invalid payment method")

    def _load_mutable_member(self, member_id: int) -> Member:
        member = self._members.get_for_update(member_id)
        if not member or not member.is_active:
            raise NotFoundError("Member not found")
        if member.status == MembershipStatus.FROZEN:
            raise InvalidStateError("Membership is frozen; unfreeze it before changing payments")
        return member

    def add_period(
        self,
        member_id: int,
        *,
        amount,
        duration_months: int,
        method=PaymentMethod.CASH,
        explicit_start: Optional[date] = None,
    ) -> BillingPeriod:
        value = self._parse_amount(amount)
        payment_method = self._parse_method(method)
        if int(duration_months) not in ALLOWED_DURATIONS_MONTHS:
            raise BadRequestError("Duration must be 1, 3, 6, 9, or 12 months")

        now = self._clock.now()
        today = now.date()

        with self._uow.transaction():
            member = self._load_mutable_member(member_id)

            start = effective_start(coverage_end=member.coverage_end, today=today, explicit_start=explicit_start)
            end = period_end(start, duration_months)
            payment_id = self._insert_with_receipt(
                member_id=member.member_id,
                amount=value,
                duration_months=int(duration_months),
                method=payment_method,
                period_start=start,
                period_end=end,
                today=today,
                now=now,
            )

            billed = replace(
                member,
                # A first payment is the deliberate move out of the trial state.
                status=MembershipStatus.ACTIVE if member.status == MembershipStatus.PENDING else member.status,
                payment_state=PaymentState.PAID,
                coverage_end=end,
                last_payment_date=today,
                registered_on=member.registered_on or start,
            )
            billed = self._engine.refresh(billed, today)

            self._members.save_derived(billed)
            self._members.append_history(
                member.member_id,
                RenewalEvent(occurred_on=today, payment_id=payment_id, coverage_end=member.coverage_end, new_coverage_end=end),
            )

        logger.info(
            f"payment {payment_id} recorded for member {member.member_id}: {start} -> {end} (status={billed.status.value})"
        )
        period = self._payments.get_by_id(payment_id)
        if period is None:
            raise NotFoundError("Payment not found")
        return period

    def _insert_with_receipt(self, *, today: date, now, **fields) -> int:
        for attempt in range(1, RECEIPT_ATTEMPTS + 1):
            receipt = generate_receipt_number(today, rng=self._rng)
            try:
                return self._payments.create(receipt_number=receipt, recorded_at=now, **fields)
            except DuplicateReceiptError:
                if attempt == RECEIPT_ATTEMPTS:
                    raise
                logger.warning(f"receipt number collision on {receipt}, regenerating")
        raise DuplicateReceiptError("Could not allocate a receipt number")

    def retract_period(self, payment_id: int) -> Member:
        today = self._clock.today()

        with self._uow.transaction():
            found = self._payments.get_by_id(payment_id)
            if not found:
                raise NotFoundError("Payment not found")

            # Member lock first, then locking reads: every period committed by a
            # concurrent add_period is visible to the recomputation.
            member = self._load_mutable_member(found.member_id)
            period = self._payments.get_by_id(payment_id, for_update=True)
            if not period.is_active:
                raise InvalidStateError("Payment was already retracted")

            self._payments.deactivate(period.payment_id)

            coverage_end = recompute_coverage(
                self._payments.list_active_for_member(member.member_id, for_update=True)
            )
            if coverage_end is None:
                updated = replace(
                    member,
                    coverage_end=None,
                    status=MembershipStatus.PENDING,
                    payment_state=PaymentState.PENDING,
                )
            else:
                updated = self._engine.refresh(replace(member, coverage_end=coverage_end), today)

            self._members.save_derived(updated)
            self._members.append_history(
                member.member_id,
                RetractionEvent(
                    occurred_on=today,
                    payment_id=period.payment_id,
                    coverage_end=member.coverage_end,
                    new_coverage_end=coverage_end,
                ),
            )

        logger.info(
            f"payment {period.payment_id} retracted for member {member.member_id}: "
            f"coverage_end={coverage_end} status={updated.status.value}"
        )
        return updated

    def list_active(self, member_id: int):
        return self._payments.list_active_for_member(member_id)

    def overview(self, *, start: Optional[date] = None, end: Optional[date] = None) -> PaymentOverview:
        return self._payments.overview(start=start, end=end)
