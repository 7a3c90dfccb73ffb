from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import Error as MySQLError
from mysql.connector.errors import IntegrityError

from ..core.exceptions import InternalError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, roll back on any error.

    Integrity errors propagate as-is so repositories can map unique-key
    violations; other driver errors become ``InternalError``.
    """
    try:
        conn = conn_factory.connect()
    except MySQLError as e:
        raise InternalError("Database unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError:
        conn.rollback()
        raise
    except MySQLError as e:
        conn.rollback()
        raise InternalError("Database error") from e
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


def duplicate_key_name(exc: IntegrityError) -> str:
    """Name of the violated unique key, taken from the server message.

    MySQL reports e.g. ``Duplicate entry 'a@b.com' for key 'users.uq_users_email'``.
    """
    msg = str(getattr(exc, "msg", "") or exc)
    marker = "for key '"
    idx = msg.rfind(marker)
    if idx < 0:
        return ""
    key = msg[idx + len(marker):].rstrip("'")
    return key.rsplit(".", 1)[-1]
