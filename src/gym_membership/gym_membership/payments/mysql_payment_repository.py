from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import PaymentMethod
from ..core.exceptions import DuplicateReceiptError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import BillingPeriod, PaymentOverview
from .repository import PaymentRepository

_COLUMNS = """
    payment_id, member_id, amount, duration_months, method, period_start, period_end,
    receipt_number, recorded_at, is_active
"""


def _to_period(r: Dict[str, Any]) -> BillingPeriod:
    return BillingPeriod(
        payment_id=int(r["payment_id"]),
        member_id=int(r["member_id"]),
        amount=Decimal(r["amount"]),
        duration_months=int(r["duration_months"]),
        method=PaymentMethod(r["method"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        receipt_number=r["receipt_number"],
        recorded_at=r["recorded_at"],
        is_active=bool(r["is_active"]),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payments(member_id, amount, duration_months, method, period_start, period_end,
                                         receipt_number, recorded_at)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(member_id),
                        amount,
                        int(duration_months),
                        method.value,
                        period_start,
                        period_end,
                        receipt_number,
                        recorded_at.replace(tzinfo=None),
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateReceiptError(
                    f"Receipt number {receipt_number} already exists", details={"receipt_number": receipt_number}
                ) from exc
            raise

    def get_by_id(self, payment_id: int, *, for_update: bool = False) -> Optional[BillingPeriod]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE payment_id=%s{lock}", (int(payment_id),))
            r = fetchone(cur)
            return _to_period(r) if r else None

    def deactivate(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE payments SET is_active=0 WHERE payment_id=%s AND is_active=1", (int(payment_id),))
            return cur.rowcount > 0

    def list_active_for_member(self, member_id: int, *, for_update: bool = False) -> Sequence[BillingPeriod]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payments
                WHERE member_id=%s AND is_active=1
                ORDER BY period_start ASC, payment_id ASC{lock}
                """,
                (int(member_id),),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def overview(self, *, start: Optional[date] = None, end: Optional[date] = None) -> PaymentOverview:
        clauses = ["is_active=1"]
        params: list[object] = []
        if start is not None and end is not None:
            clauses.append("DATE(recorded_at) BETWEEN %s AND %s")
            params.extend([start, end])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS total, COALESCE(SUM(amount), 0) AS amount FROM payments WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            r = fetchone(cur) or {"total": 0, "amount": 0}
            return PaymentOverview(total_payments=int(r["total"]), total_amount=Decimal(r["amount"]))
