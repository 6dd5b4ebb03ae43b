from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, member_id, batch_id, attendance_date, status, check_in_time, marked_by, note"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        member_id=int(r["member_id"]),
        batch_id=int(r["batch_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
        note=r.get("note"),
    )


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # DATETIME columns hold facility-local wall time.
    return value.replace(tzinfo=None) if value is not None else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_member_and_date(self, member_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE member_id=%s AND attendance_date=%s
                """,
                (int(member_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        member_id: int,
        batch_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[datetime] = None,
        marked_by: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(member_id, batch_id, attendance_date, status, check_in_time, marked_by, note)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(member_id), int(batch_id), attendance_date, status.value, _naive(check_in_time), marked_by, note),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateAttendanceError("Attendance already marked for today") from exc
            raise

    def update_mark(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        check_in_time: Optional[datetime],
        marked_by: Optional[int],
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_time=%s, marked_by=%s, note=%s
                WHERE attendance_id=%s
                """,
                (status.value, _naive(check_in_time), marked_by, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def bulk_create_absent(
        self,
        *,
        attendance_date: date,
        member_batches: Sequence[tuple[int, int]],
        note: Optional[str] = None,
    ) -> list[int]:
        inserted: list[int] = []
        if not member_batches:
            return inserted

        with db_cursor(self._conn_factory) as (_, cur):
            for member_id, batch_id in member_batches:
                # INSERT IGNORE: a concurrent check-in or sweep that got there first wins.
                cur.execute(
                    """
                    INSERT IGNORE INTO attendance_records(member_id, batch_id, attendance_date, status, check_in_time, marked_by, note)
                    VALUES(%s,%s,%s,%s,NULL,NULL,%s)
                    """,
                    (int(member_id), int(batch_id), attendance_date, AttendanceStatus.ABSENT.value, note),
                )
                if cur.rowcount == 1:
                    inserted.append(int(member_id))
        return inserted

    def member_ids_for_date(self, attendance_date: date) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id FROM attendance_records WHERE attendance_date=%s", (attendance_date,))
            return {int(r["member_id"]) for r in fetchall(cur)}

    def count_by_status(self, *, start_date: date, end_date: date) -> dict[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS total
                FROM attendance_records
                WHERE attendance_date BETWEEN %s AND %s
                GROUP BY status
                """,
                (start_date, end_date),
            )
            counts = {s: 0 for s in AttendanceStatus}
            for r in fetchall(cur):
                counts[AttendanceStatus(r["status"])] = int(r["total"])
            return counts

    def get_recent_for_member(self, member_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE member_id=%s
                ORDER BY attendance_date DESC
                LIMIT %s
                """,
                (int(member_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
