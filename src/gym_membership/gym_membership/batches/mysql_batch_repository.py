from __future__ import annotations

from datetime import time
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import Batch
from .repository import BatchRepository


def _to_batch(r: Dict[str, Any]) -> Batch:
    return Batch(
        batch_id=int(r["batch_id"]),
        name=r["name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        capacity=int(r.get("capacity") or 0),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLBatchRepository(BatchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, batch_id: int) -> Optional[Batch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT batch_id, name, start_time, end_time, capacity, is_active
                FROM batches
                WHERE batch_id=%s
                """,
                (int(batch_id),),
            )
            r = fetchone(cur)
            return _to_batch(r) if r else None

    def list_active(self) -> Sequence[Batch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT batch_id, name, start_time, end_time, capacity, is_active
                FROM batches
                WHERE is_active=1
                ORDER BY start_time
                """
            )
            return [_to_batch(r) for r in fetchall(cur)]

    def create(self, *, name: str, start_time: time, end_time: time, capacity: int = 30) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO batches(name, start_time, end_time, capacity) VALUES(%s,%s,%s,%s)",
                    (name, start_time, end_time, int(capacity)),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Batch name already exists") from exc
            raise

    def update(self, batch: Batch) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE batches SET name=%s, start_time=%s, end_time=%s, capacity=%s WHERE batch_id=%s",
                    (batch.name, batch.start_time, batch.end_time, int(batch.capacity), int(batch.batch_id)),
                )
                return cur.rowcount > 0
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Batch name already exists") from exc
            raise

    def deactivate(self, batch_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE batches SET is_active=0 WHERE batch_id=%s AND is_active=1", (int(batch_id),))
            return cur.rowcount > 0
