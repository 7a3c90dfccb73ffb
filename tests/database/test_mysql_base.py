from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError, OperationalError, ProgrammingError

from presence_api.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from presence_api.core.enums import AttendanceStatus
from presence_api.core.exceptions import ConflictError, DuplicateError, InternalError
from presence_api.database.mysql_base import db_cursor, duplicate_key_name, is_duplicate_key
from presence_api.users.model import ProfilePatch
from presence_api.users.mysql_user_repository import MySQLUserRepository


class FakeCursor:
    def __init__(self, error=None, rows=(), rowcount=1):
        self.error = error
        self.rows = list(rows)
        self.executed = []
        self.closed = False
        self.lastrowid = 1
        self.rowcount = rowcount

    def execute(self, sql, params=None):
        if self.error:
            raise self.error
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, error=None, **cursor_kwargs):
        self.cursor_obj = FakeCursor(error, **cursor_kwargs)
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, connect_error=None):
        self.conn = conn or FakeConnection()
        self.connect_error = connect_error

    def connect(self):
        if self.connect_error:
            raise self.connect_error
        return self.conn


def _dup(key: str) -> IntegrityError:
    return IntegrityError(
        msg=f"Duplicate entry 'x' for key '{key}'",
        errno=errorcode.ER_DUP_ENTRY,
    )


def test_db_cursor_commits_and_closes():
    factory = FakeFactory()

    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    assert factory.conn.committed
    assert factory.conn.closed
    assert factory.conn.cursor_obj.closed


def test_driver_errors_become_internal_errors():
    factory = FakeFactory(FakeConnection(ProgrammingError(msg="bad sql")))

    with pytest.raises(InternalError):
        with db_cursor(factory) as (_, cur):
            cur.execute("SELEC 1")

    assert factory.conn.rolled_back
    assert factory.conn.closed


def test_unreachable_database_is_internal_error():
    with pytest.raises(InternalError):
        with db_cursor(FakeFactory(connect_error=OperationalError(msg="refused"))):
            pass


def test_duplicate_key_helpers():
    exc = _dup("users.uq_users_email")

    assert is_duplicate_key(exc)
    assert duplicate_key_name(exc) == "uq_users_email"
    assert duplicate_key_name(IntegrityError(msg="other")) == ""


def test_unique_key_violation_on_check_in_is_duplicate():
    repo = MySQLAttendanceRepository(FakeFactory(FakeConnection(_dup("attendance_records.uq_attendance_user_date"))))

    with pytest.raises(DuplicateError):
        repo.create_checkin(
            user_id=1,
            work_date=date(2026, 2, 2),
            check_in_time=datetime(2026, 2, 2, 8, 30, tzinfo=timezone.utc),
            location="Office",
            status=AttendanceStatus.PRESENT,
        )


@pytest.mark.parametrize(
    "key, message",
    [
        ("users.uq_users_email", "Email already registered"),
        ("users.uq_users_full_name", "Full name already registered"),
    ],
)
def test_unique_key_violation_on_register_is_conflict(key, message):
    repo = MySQLUserRepository(FakeFactory(FakeConnection(_dup(key))))

    with pytest.raises(ConflictError, match=message):
        repo.create_user(
            full_name="Ada",
            phone="555",
            email="a@b.com",
            password_hash="h",
            verification_token=None,
        )


def _attendance_row(**overrides):
    row = {
        "attendance_id": 7,
        "user_id": 1,
        "work_date": date(2026, 2, 2),
        "check_in_time": datetime(2026, 2, 2, 8, 30),
        "check_out_time": None,
        "location": "Office",
        "status": "present",
    }
    row.update(overrides)
    return row


def _user_row(**overrides):
    row = {
        "user_id": 1,
        "full_name": "Ada",
        "phone": "555",
        "email": "ada@example.com",
        "password_hash": "h",
        "verification_token": None,
        "email_verified": 1,
    }
    row.update(overrides)
    return row


def test_check_out_locks_open_record_then_closes_it():
    factory = FakeFactory(FakeConnection(rows=[_attendance_row()]))
    repo = MySQLAttendanceRepository(factory)

    record = repo.close_checkout(
        user_id=1,
        work_date=date(2026, 2, 2),
        check_out_time=datetime(2026, 2, 2, 17, 0, tzinfo=timezone.utc),
    )

    select, update = factory.conn.cursor_obj.executed
    assert "check_out_time IS NULL FOR UPDATE" in select[0]
    assert select[1] == (1, date(2026, 2, 2))
    assert update[0].startswith("UPDATE attendance_records SET check_out_time=%s")
    assert "AND check_out_time IS NULL" in update[0]
    assert update[1] == (datetime(2026, 2, 2, 17, 0), 7)
    assert record.attendance_id == 7
    assert record.check_in_time == datetime(2026, 2, 2, 8, 30, tzinfo=timezone.utc)
    assert record.check_out_time == datetime(2026, 2, 2, 17, 0, tzinfo=timezone.utc)
    assert factory.conn.committed


def test_check_out_without_open_record_returns_none():
    factory = FakeFactory(FakeConnection(rows=[]))
    repo = MySQLAttendanceRepository(factory)

    record = repo.close_checkout(
        user_id=1,
        work_date=date(2026, 2, 2),
        check_out_time=datetime(2026, 2, 2, 17, 0, tzinfo=timezone.utc),
    )

    assert record is None
    assert len(factory.conn.cursor_obj.executed) == 1


def test_check_out_that_loses_the_update_returns_none():
    factory = FakeFactory(FakeConnection(rows=[_attendance_row()], rowcount=0))
    repo = MySQLAttendanceRepository(factory)

    record = repo.close_checkout(
        user_id=1,
        work_date=date(2026, 2, 2),
        check_out_time=datetime(2026, 2, 2, 17, 0, tzinfo=timezone.utc),
    )

    assert record is None
    assert len(factory.conn.cursor_obj.executed) == 2


def test_identifier_lookup_orders_email_match_first():
    factory = FakeFactory(FakeConnection(rows=[_user_row()]))
    repo = MySQLUserRepository(factory)

    user = repo.get_by_identifier("ada@example.com")

    (sql, params), = factory.conn.cursor_obj.executed
    assert "WHERE email=%s OR full_name=%s" in sql
    assert "ORDER BY (email=%s) DESC, user_id ASC LIMIT 1" in sql
    assert params == ("ada@example.com", "ada@example.com", "ada@example.com")
    assert user.user_id == 1
    assert user.email_verified is True


def test_profile_update_touches_only_supplied_columns_and_rereads():
    factory = FakeFactory(FakeConnection(rows=[_user_row(phone="999")]))
    repo = MySQLUserRepository(factory)

    user = repo.update_profile(1, ProfilePatch(phone="999"))

    update, select = factory.conn.cursor_obj.executed
    assert update == ("UPDATE users SET phone=%s WHERE user_id=%s", ("999", 1))
    assert select[0].startswith("SELECT user_id, full_name")
    assert select[1] == (1,)
    assert user.phone == "999"
    assert user.email == "ada@example.com"


def test_profile_update_for_missing_user_returns_none():
    factory = FakeFactory(FakeConnection(rows=[], rowcount=0))
    repo = MySQLUserRepository(factory)

    assert repo.update_profile(99, ProfilePatch(email="x@example.com")) is None
