from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    shared = conn_factory.current()
    if shared is not None:
        # Commit/rollback belongs to the enclosing transaction.
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: IntegrityError) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values.

    mysql-connector hands TIME columns back as ``timedelta`` (C extension),
    ``time`` or ``'HH:MM[:SS]'`` strings depending on driver and settings.
    """

    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)

    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*parts[:3])

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
