from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import StaffCheckInSettings, TeacherWorkRecord


class StaffSettingsRepository(Protocol):
    def get(self, teacher_id: int, center_id: int) -> Optional[StaffCheckInSettings]:
        raise NotImplementedError

    def list_for_center(self, center_id: int) -> Sequence[StaffCheckInSettings]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        teacher_id: int,
        center_id: int,
        check_in_code: str,
        recipients: Sequence[str],
        message_template: Optional[str],
        is_active: bool,
    ) -> StaffCheckInSettings:
        raise NotImplementedError


class WorkRecordRepository(Protocol):
    def get_for_day(self, teacher_id: int, center_id: int, work_date: date) -> Optional[TeacherWorkRecord]:
        raise NotImplementedError

    def create_check_in(self, *, teacher_id: int, center_id: int, work_date: date, at: datetime) -> TeacherWorkRecord:
        """Raises DuplicateRecordError when the day already has a record."""
        raise NotImplementedError

    def set_check_out(self, record_id: int, *, at: datetime, work_minutes: int) -> bool:
        raise NotImplementedError

    def list_for_range(self, center_id: int, start: date, end: date) -> Sequence[TeacherWorkRecord]:
        raise NotImplementedError

    def mark_missing_checkouts(self, work_date: date) -> int:
        raise NotImplementedError

    def delete_before(self, cutoff: date) -> int:
        raise NotImplementedError
