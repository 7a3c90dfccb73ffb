from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from mysql.connector import pooling
from mysql.connector.errors import PoolError


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5
    # Seconds a caller waits for a free pooled connection
    pool_timeout: float = 10.0

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "presence_db")),
            pool_size=int(db_config.get("pool_size", 5)),
            pool_timeout=float(db_config.get("pool_timeout", 10.0)),
        )


class _PooledConnection:
    """Pooled connection whose ``close()`` also frees the caller's slot."""

    def __init__(self, cnx, release: Callable[[], None]):
        self._cnx = cnx
        self._release: Optional[Callable[[], None]] = release

    def __getattr__(self, name):
        return getattr(self._cnx, name)

    def close(self) -> None:
        release, self._release = self._release, None
        if release is None:
            return
        try:
            self._cnx.close()
        finally:
            release()


class DatabaseConnection:
    """Connection factory backed by a process-wide MySQL connection pool.

    One instance is built at start-up and handed to every repository. The pool
    itself is opened on first use so building the app does not need a live
    database. ``MySQLConnectionPool.get_connection()`` fails at once when every
    connection is lent out, so callers first take one of ``pool_size`` slots and
    wait up to ``pool_timeout`` seconds for it. Closing the connection returns
    it to the pool and frees the slot.
    """

    def __init__(self, config: DBConfig, *, pool_name: str = "presence_api"):
        self._config = config
        self._pool_name = pool_name
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(int(config.pool_size))

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = pooling.MySQLConnectionPool(
                        pool_name=self._pool_name,
                        pool_size=int(self._config.pool_size),
                        host=self._config.host,
                        port=int(self._config.port),
                        user=self._config.user,
                        password=self._config.password,
                        database=self._config.database,
                        time_zone="+00:00",
                    )
        return self._pool

    def connect(self):
        timeout = float(self._config.pool_timeout)
        if not self._slots.acquire(timeout=timeout):
            raise PoolError(msg=f"No pooled connection freed within {timeout:g}s")
        try:
            cnx = self._get_pool().get_connection()
        except Exception:
            self._slots.release()
            raise
        return _PooledConnection(cnx, self._slots.release)
