from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Newest check-in first."""

        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        location: str,
        status: AttendanceStatus,
    ) -> int:
        """Insert a check-in.

        The store enforces one record per (user_id, work_date); a violation
        raises ``DuplicateError``.
        """

        raise NotImplementedError

    def close_checkout(self, *, user_id: int, work_date: date, check_out_time: datetime) -> Optional[AttendanceRecord]:
        """Set the check-out time of the open record for that day.

        Returns None when there is no record or it is already checked out.
        """

        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError
