from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import LifecycleEventKind, MembershipStatus, PaymentState
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import FreezeEvent, LifecycleEvent, Member, RenewalEvent, RetractionEvent, UnfreezeEvent
from .repository import MemberRepository

_MEMBER_COLUMNS = """
    member_id, name, phone, email, date_of_birth, batch_id, registered_on, coverage_end,
    status, payment_state, last_payment_date, freeze_start, freeze_end, freeze_reason, is_active
"""

_HISTORY_COLUMNS = """
    kind, occurred_on, prior_status, coverage_end, new_coverage_end, days_frozen, extra_days, payment_id, reason
"""


def _to_member(r: Dict[str, Any]) -> Member:
    return Member(
        member_id=int(r["member_id"]),
        name=r["name"],
        phone=r["phone"],
        email=r.get("email"),
        date_of_birth=r.get("date_of_birth"),
        batch_id=int(r["batch_id"]) if r.get("batch_id") is not None else None,
        registered_on=r.get("registered_on"),
        coverage_end=r.get("coverage_end"),
        status=MembershipStatus(r["status"]),
        payment_state=PaymentState(r["payment_state"]),
        last_payment_date=r.get("last_payment_date"),
        freeze_start=r.get("freeze_start"),
        freeze_end=r.get("freeze_end"),
        freeze_reason=r.get("freeze_reason"),
        is_active=bool(r.get("is_active", 1)),
    )


def _to_event(r: Dict[str, Any]) -> LifecycleEvent:
    kind = LifecycleEventKind(r["kind"])
    if kind == LifecycleEventKind.FREEZE:
        return FreezeEvent(
            occurred_on=r["occurred_on"],
            prior_status=MembershipStatus(r["prior_status"]),
            coverage_end=r.get("coverage_end"),
            reason=r.get("reason") or "",
        )
    if kind == LifecycleEventKind.UNFREEZE:
        return UnfreezeEvent(
            occurred_on=r["occurred_on"],
            days_frozen=int(r["days_frozen"]),
            extra_days=int(r["extra_days"]),
            coverage_end=r.get("coverage_end"),
            new_coverage_end=r["new_coverage_end"],
        )
    if kind == LifecycleEventKind.RENEWAL:
        return RenewalEvent(
            occurred_on=r["occurred_on"],
            payment_id=int(r["payment_id"]),
            coverage_end=r.get("coverage_end"),
            new_coverage_end=r["new_coverage_end"],
        )
    return RetractionEvent(
        occurred_on=r["occurred_on"],
        payment_id=int(r["payment_id"]),
        coverage_end=r.get("coverage_end"),
        new_coverage_end=r.get("new_coverage_end"),
    )


def _event_row(event: LifecycleEvent) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "kind": event.kind.value,
        "occurred_on": event.occurred_on,
        "prior_status": None,
        "coverage_end": event.coverage_end,
        "new_coverage_end": getattr(event, "new_coverage_end", None),
        "days_frozen": None,
        "extra_days": None,
        "payment_id": getattr(event, "payment_id", None),
        "reason": None,
    }
    if isinstance(event, FreezeEvent):
        row.update(prior_status=event.prior_status.value, reason=event.reason)
    elif isinstance(event, UnfreezeEvent):
        row.update(days_frozen=event.days_frozen, extra_days=event.extra_days)
    return row


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple, *, for_update: bool = False) -> Optional[Member]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE {where}{lock}", params)
            r = fetchone(cur)
            return _to_member(r) if r else None

    def get_by_id(self, member_id: int) -> Optional[Member]:
        return self._get_one("member_id=%s", (int(member_id),))

    def get_for_update(self, member_id: int) -> Optional[Member]:
        return self._get_one("member_id=%s", (int(member_id),), for_update=True)

    def get_by_phone(self, phone: str) -> Optional[Member]:
        return self._get_one("phone=%s", (phone,))

    def find_for_check_in(self, *, phone: str, email: str) -> Optional[Member]:
        return self._get_one("phone=%s AND email=%s AND is_active=1", (phone, email))

    def create(
        self,
        *,
        name: str,
        phone: str,
        email: Optional[str],
        date_of_birth: Optional[date],
        batch_id: Optional[int],
        registered_on: date,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO members(name, phone, email, date_of_birth, batch_id, registered_on, status, payment_state)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        name,
                        phone,
                        email,
                        date_of_birth,
                        batch_id,
                        registered_on,
                        MembershipStatus.PENDING.value,
                        PaymentState.PENDING.value,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("This phone number is already registered") from exc
            raise

    def save_derived(self, member: Member) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE members
                SET coverage_end=%s, status=%s, payment_state=%s, last_payment_date=%s, registered_on=%s,
                    freeze_start=%s, freeze_end=%s, freeze_reason=%s
                WHERE member_id=%s
                """,
                (
                    member.coverage_end,
                    member.status.value,
                    member.payment_state.value,
                    member.last_payment_date,
                    member.registered_on,
                    member.freeze_start,
                    member.freeze_end,
                    member.freeze_reason,
                    member.member_id,
                ),
            )
            return cur.rowcount > 0

    def set_batch(self, member_id: int, batch_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE members SET batch_id=%s WHERE member_id=%s", (batch_id, int(member_id)))
            return cur.rowcount > 0

    def list_by_batch(self, batch_id: int) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MEMBER_COLUMNS} FROM members WHERE batch_id=%s AND is_active=1 ORDER BY name",
                (int(batch_id),),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def count_current_in_batch(self, batch_id: int) -> int:
        current = [s.value for s in MembershipStatus if s.is_current]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total FROM members
                WHERE batch_id=%s AND is_active=1 AND status IN ({', '.join(['%s'] * len(current))})
                """,
                (int(batch_id), *current),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_by_status(self, statuses: Iterable[MembershipStatus], *, with_batch_only: bool = False) -> Sequence[Member]:
        values = [MembershipStatus(s).value for s in statuses]
        if not values:
            return []

        clauses = ["is_active=1", f"status IN ({', '.join(['%s'] * len(values))})"]
        if with_batch_only:
            clauses.append("batch_id IS NOT NULL")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MEMBER_COLUMNS} FROM members WHERE {' AND '.join(clauses)} ORDER BY member_id",
                tuple(values),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def count_by_status(self) -> dict[MembershipStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS total FROM members WHERE is_active=1 GROUP BY status")
            counts = {s: 0 for s in MembershipStatus}
            for r in fetchall(cur):
                counts[MembershipStatus(r["status"])] = int(r["total"])
            return counts

    def append_history(self, member_id: int, event: LifecycleEvent) -> None:
        row = _event_row(event)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO member_history(member_id, {_HISTORY_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(member_id),
                    row["kind"],
                    row["occurred_on"],
                    row["prior_status"],
                    row["coverage_end"],
                    row["new_coverage_end"],
                    row["days_frozen"],
                    row["extra_days"],
                    row["payment_id"],
                    row["reason"],
                ),
            )

    def list_history(self, member_id: int) -> Sequence[LifecycleEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HISTORY_COLUMNS} FROM member_history WHERE member_id=%s ORDER BY event_id",
                (int(member_id),),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def latest_history(self, member_id: int, kind: LifecycleEventKind) -> Optional[LifecycleEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_HISTORY_COLUMNS} FROM member_history
                WHERE member_id=%s AND kind=%s
                ORDER BY event_id DESC
                LIMIT 1
                """,
                (int(member_id), LifecycleEventKind(kind).value),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None
