from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod
from .model import BillingPeriod, PaymentOverview


class PaymentRepository(Protocol):
    def create(
        self,
        *,
        member_id: int,
        amount: Decimal,
        duration_months: int,
        method: PaymentMethod,
        period_start: date,
        period_end: date,
        receipt_number: str,
        recorded_at: datetime,
    ) -> int:
        """Insert a period. Raises ``DuplicateReceiptError`` on a receipt collision."""

        raise NotImplementedError

    def get_by_id(self, payment_id: int, *, for_update: bool = False) -> Optional[BillingPeriod]:
        raise NotImplementedError

    def deactivate(self, payment_id: int) -> bool:
        """Soft-retract: the row stays, ``is_active`` is cleared."""

        raise NotImplementedError

    def list_active_for_member(self, member_id: int, *, for_update: bool = False) -> Sequence[BillingPeriod]:
        """Active periods ordered by ``period_start`` ascending.

        ``for_update`` makes it a locking read, which sees rows committed after
        the enclosing transaction took its snapshot.
        """

        raise NotImplementedError

    def overview(self, *, start: Optional[date] = None, end: Optional[date] = None) -> PaymentOverview:
        raise NotImplementedError
