from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one day and scope.

    class_id None is the center-level scope. A record created by check-out
    alone carries check_in_at == check_out_at.
    """

    attendance_id: int
    student_id: int
    center_id: int
    class_id: Optional[int]
    check_in_date: date
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    was_late: bool
    status: AttendanceStatus
    check_in_notification_sent: bool = False
    late_notification_sent: bool = False
    check_out_notification_sent: bool = False

    @property
    def has_timestamps(self) -> bool:
        return self.check_in_at is not None or self.check_out_at is not None

    @property
    def is_check_out_only(self) -> bool:
        return self.check_out_at is not None and self.check_in_at == self.check_out_at


@dataclass(frozen=True)
class AttendanceWithStudent:
    """Read-model for the daily roster."""

    record: AttendanceRecord
    student_name: str
    grade: Optional[str] = None
    class_name: Optional[str] = None


@dataclass(frozen=True)
class AttendanceWithClass:
    """Read-model for a student's history."""

    record: AttendanceRecord
    class_name: Optional[str] = None
