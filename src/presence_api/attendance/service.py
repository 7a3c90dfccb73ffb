from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, today_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateError, ForbiddenError, NoCheckInError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per user and per UTC day: NONE -> CHECKED_IN -> CHECKED_OUT (terminal)."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._users = users
        self._history_limit = int(history_limit)

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        # DATETIME columns keep whole seconds only
        return (now or now_utc()).replace(microsecond=0)

    def check_in(self, user_id: int, location: Optional[str], *, now: Optional[datetime] = None) -> AttendanceRecord:
        if not isinstance(location, str) or not location.strip():
            raise ValidationError("Location is required")

        now = self._now(now)
        today = today_utc(now)

        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")

        # Fast path only: the unique (user_id, work_date) key is what actually
        # rejects a concurrent second check-in.
        if self._attendance.get_for_user_and_date(user_id, today):
            raise DuplicateError("Already checked in today")

        attendance_id = self._attendance.create_checkin(
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            location=location,
            status=AttendanceStatus.PRESENT,
        )
        logger.info("User %s checked in (record %s)", user_id, attendance_id)
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            location=location,
            status=AttendanceStatus.PRESENT,
        )

    def check_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._now(now)
        record = self._attendance.close_checkout(user_id=user_id, work_date=today_utc(now), check_out_time=now)
        if not record:
            raise NoCheckInError("No check-in found for today")
        logger.info("User %s checked out (record %s)", user_id, record.attendance_id)
        return record

    def get_today(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, today_utc(self._now(now)))

    def get_history(self, user_id: int) -> Sequence[AttendanceRecord]:
        return list(self._attendance.get_recent_for_user(user_id, self._history_limit))

    def delete_record(self, user_id: int, attendance_id: int) -> None:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        if record.user_id != user_id:
            raise ForbiddenError("You are not allowed to delete this record")

        if not self._attendance.delete_by_id(attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("User %s deleted attendance record %s", user_id, attendance_id)
