from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from presence_api.attendance.model import AttendanceRecord
from presence_api.container import build_services
from presence_api.core.enums import AttendanceStatus
from presence_api.core.exceptions import ConflictError, DuplicateError
from presence_api.security.passwords import PasswordHasher
from presence_api.security.tokens import TokenCodec
from presence_api.users.model import ProfilePatch, User

TEST_SECRET = "test-jwt-secret"


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._id = 0

    def add(self, *, full_name: str, phone: str, email: str, password: str, email_verified: bool = False) -> User:
        user_id = self.create_user(
            full_name=full_name,
            phone=phone,
            email=email,
            password_hash=PasswordHasher().hash(password),
            verification_token=None,
            email_verified=email_verified,
        )
        return self.users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_identifier(self, identifier: str) -> Optional[User]:
        return self.get_by_email(identifier) or next(
            (u for u in self.users.values() if u.full_name == identifier), None
        )

    def create_user(self, *, full_name, phone, email, password_hash, verification_token, email_verified=False) -> int:
        if self.get_by_email(email):
            raise ConflictError("Email already registered")
        if any(u.full_name == full_name for u in self.users.values()):
            raise ConflictError("Full name already registered")
        self._id += 1
        self.users[self._id] = User(
            user_id=self._id,
            full_name=full_name,
            phone=phone,
            email=email,
            password_hash=password_hash,
            verification_token=verification_token,
            email_verified=email_verified,
        )
        return self._id

    def mark_email_verified(self, email: str) -> bool:
        user = self.get_by_email(email)
        if not user:
            return False
        self.users[user.user_id] = replace(user, email_verified=True, verification_token=None)
        return True

    def update_profile(self, user_id: int, patch: ProfilePatch) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None
        changes = patch.changes()
        if "email" in changes:
            owner = self.get_by_email(changes["email"])
            if owner and owner.user_id != user_id:
                raise ConflictError("Email already registered")
        self.users[user_id] = replace(user, **changes)
        return self.users[user_id]

    def update_password(self, user_id: int, password_hash: str) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, password_hash=password_hash)
        return True


class InMemoryAttendance:
    """Enforces one record per (user_id, work_date) like the unique key does."""

    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.records.values() if r.user_id == user_id and r.work_date == work_date),
            None,
        )

    def get_recent_for_user(self, user_id: int, limit: int):
        items = [r for r in self.records.values() if r.user_id == user_id]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items[:limit]

    def create_checkin(self, *, user_id, work_date, check_in_time, location, status: AttendanceStatus) -> int:
        if any(r.user_id == user_id and r.work_date == work_date for r in self.records.values()):
            raise DuplicateError("Already checked in today")
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            location=location,
            status=status,
        )
        return self._id

    def close_checkout(self, *, user_id, work_date, check_out_time) -> Optional[AttendanceRecord]:
        rec = self.get_for_user_and_date(user_id, work_date)
        if not rec or rec.check_out_time is not None:
            return None
        self.records[rec.attendance_id] = replace(rec, check_out_time=check_out_time)
        return self.records[rec.attendance_id]

    def delete_by_id(self, attendance_id: int) -> bool:
        return self.records.pop(attendance_id, None) is not None


class FakeMailer:
    def __init__(self, *, ok: bool = True, raises: bool = False):
        self.ok = ok
        self.raises = raises
        self.sent: list[dict] = []

    def send_verification(self, *, email: str, full_name: str, token: str) -> bool:
        if self.raises:
            raise RuntimeError("smtp down")
        self.sent.append({"email": email, "full_name": full_name, "token": token})
        return self.ok


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def tokens() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture
def container(users_repo, attendance_repo, tokens, mailer):
    return build_services(users=users_repo, attendance=attendance_repo, tokens=tokens, mailer=mailer)


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def attendance_service(container):
    return container.attendance_service


@pytest.fixture
def app(container, monkeypatch):
    from presence_api.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()
