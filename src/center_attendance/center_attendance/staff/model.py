from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class StaffCheckInSettings:
    """Personal check-in code of one staff member in one center."""

    settings_id: int
    teacher_id: int
    center_id: int
    check_in_code: str
    recipients: Tuple[str, ...] = ()
    message_template: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class TeacherWorkRecord:
    record_id: int
    teacher_id: int
    center_id: int
    work_date: date
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    work_minutes: Optional[int] = None
    no_check_out: bool = False


@dataclass(frozen=True)
class WorkDaySummary:
    teacher_id: int
    full_name: str
    work_days: int
    total_minutes: int
