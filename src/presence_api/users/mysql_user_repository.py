from __future__ import annotations

from typing import Any, Dict, Optional

from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchone, is_duplicate_key
from .model import ProfilePatch, User
from .repository import UserRepository

_USER_COLUMNS = "user_id, full_name, phone, email, password_hash, verification_token, email_verified"

# Columns a profile patch may touch; values are always bound as parameters.
_PROFILE_COLUMNS = {"email": "email", "phone": "phone"}

_CONFLICT_MESSAGES = {
    "uq_users_email": "Email already registered",
    "uq_users_full_name": "Full name already registered",
}


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        phone=row["phone"],
        email=row["email"],
        password_hash=row["password_hash"],
        verification_token=row.get("verification_token"),
        email_verified=bool(row.get("email_verified", False)),
    )


def _conflict(exc: IntegrityError) -> ConflictError:
    return ConflictError(_CONFLICT_MESSAGES.get(duplicate_key_name(exc), "Account already registered"))


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where} LIMIT 1", params)
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id=%s", (int(user_id),))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email=%s", (email,))

    def get_by_identifier(self, identifier: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE email=%s OR full_name=%s
                ORDER BY (email=%s) DESC, user_id ASC
                LIMIT 1
                """,
                (identifier, identifier, identifier),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        phone: str,
        email: str,
        password_hash: str,
        verification_token: Optional[str],
        email_verified: bool = False,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(full_name, phone, email, password_hash, verification_token, email_verified)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (full_name, phone, email, password_hash, verification_token, int(bool(email_verified))),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise _conflict(e) from e
            raise

    def mark_email_verified(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET email_verified=1, verification_token=NULL WHERE email=%s",
                (email,),
            )
            return cur.rowcount > 0

    def update_profile(self, user_id: int, patch: ProfilePatch) -> Optional[User]:
        changes = patch.changes()
        assignments = ", ".join(f"{_PROFILE_COLUMNS[field]}=%s" for field in changes)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if assignments:
                    cur.execute(
                        f"UPDATE users SET {assignments} WHERE user_id=%s",
                        (*changes.values(), int(user_id)),
                    )
                # rowcount is 0 for unchanged values, so re-read to tell "missing" apart
                cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
                row = fetchone(cur)
                return _to_user(row) if row else None
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise _conflict(e) from e
            raise

    def update_password(self, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0
