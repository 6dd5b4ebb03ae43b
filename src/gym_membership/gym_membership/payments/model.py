from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from ..core.enums import PaymentMethod


@dataclass(frozen=True)
class BillingPeriod:
    """Domain entity: one payment's contribution to a member's coverage."""

    payment_id: int
    member_id: int
    amount: Decimal
    duration_months: int
    method: PaymentMethod
    period_start: date
    period_end: date
    receipt_number: str
    recorded_at: datetime
    is_active: bool = True


@dataclass(frozen=True)
class PaymentOverview:
    total_payments: int
    total_amount: Decimal
