from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, NotificationEvent
from .model import AttendanceRecord, AttendanceWithClass, AttendanceWithStudent


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_scope(self, student_id: int, check_in_date: date, class_id: Optional[int]) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        center_id: int,
        class_id: Optional[int],
        check_in_date: date,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
        was_late: bool,
        status: AttendanceStatus,
    ) -> AttendanceRecord:
        """Raises DuplicateRecordError when the (student, day, scope) key exists."""
        raise NotImplementedError

    def set_check_in(self, attendance_id: int, *, check_in_at: datetime, was_late: bool, status: AttendanceStatus) -> bool:
        """Fill check-in on a record that has no timestamps yet. False if it already has one."""
        raise NotImplementedError

    def set_check_out(self, attendance_id: int, *, check_out_at: datetime) -> bool:
        """Set check-out once. A record without check-in gets check_in_at = check_out_at."""
        raise NotImplementedError

    def update_status(self, attendance_id: int, *, status: AttendanceStatus, was_late: bool) -> bool:
        raise NotImplementedError

    def mark_notification_sent(self, attendance_id: int, event: NotificationEvent, *, at: datetime) -> None:
        raise NotImplementedError

    def list_for_date(self, center_id: int, check_in_date: date) -> Sequence[AttendanceWithStudent]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, start: date, end: date) -> Sequence[AttendanceWithClass]:
        """Newest first."""
        raise NotImplementedError

    def delete_before(self, cutoff: date) -> int:
        raise NotImplementedError
