from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import mysql.connector
from loguru import logger


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "gym_db")),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Outside a transaction every repository call gets a short-lived connection.
    Inside ``transaction()`` the calling thread is pinned to one connection so
    that a multi-statement mutation commits or rolls back as a unit.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    def current(self):
        """Connection pinned by an open transaction on this thread, if any."""
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self.current() is not None:
            # Nested blocks join the outer transaction.
            yield
            return

        conn = self.connect()
        # Plain reads see rows committed while this transaction waited on a lock.
        conn.start_transaction(isolation_level="READ COMMITTED")
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            logger.debug("rolling back transaction")
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()
