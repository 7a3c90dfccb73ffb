from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day (UTC).

    ``location`` is stored as submitted; it is never parsed or validated.
    """

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    location: str
    status: AttendanceStatus = AttendanceStatus.PRESENT

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user_id": self.user_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": isoformat_or_none(self.check_in_time),
            "check_out_time": isoformat_or_none(self.check_out_time),
            "location": self.location,
            "status": self.status.value,
        }
