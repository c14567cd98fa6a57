from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import days_before, now_local, years_before
from ..core import constants
from ..staff.repository import WorkRecordRepository
from .repository import MaintenanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruneResult:
    attendance_deleted: int
    work_records_deleted: int


def next_grade(grade: str) -> Optional[str]:
    """One school year up; None for grades outside the known ladder."""
    return constants.GRADE_PROGRESSION.get((grade or "").strip())


class MaintenanceService:
    """Daily housekeeping jobs. Each one is safe to run more than once a day."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        work_records: WorkRecordRepository,
        maintenance: MaintenanceRepository,
        *,
        attendance_retention_days: int = constants.ATTENDANCE_RETENTION_DAYS,
        work_record_retention_years: int = constants.WORK_RECORD_RETENTION_YEARS,
        tz_name: str = constants.DEFAULT_CENTER_TIMEZONE,
    ):
        self._attendance = attendance
        self._work_records = work_records
        self._maintenance = maintenance
        self._attendance_retention_days = int(attendance_retention_days)
        self._work_record_retention_years = int(work_record_retention_years)
        self._tz_name = tz_name

    def _today(self, today: date | None) -> date:
        return today or now_local(self._tz_name).date()

    def mark_missing_checkouts(self, today: date | None = None) -> int:
        yesterday = self._today(today) - timedelta(days=1)
        count = self._work_records.mark_missing_checkouts(yesterday)
        logger.info("Marked %d work records of %s without check-out", count, yesterday)
        return count

    def prune_retention(self, today: date | None = None) -> PruneResult:
        today = self._today(today)
        attendance_cutoff = days_before(today, self._attendance_retention_days)
        work_cutoff = years_before(today, self._work_record_retention_years)

        result = PruneResult(
            attendance_deleted=self._attendance.delete_before(attendance_cutoff),
            work_records_deleted=self._work_records.delete_before(work_cutoff),
        )
        logger.info(
            "Retention: %d attendance records before %s, %d work records before %s deleted",
            result.attendance_deleted,
            attendance_cutoff,
            result.work_records_deleted,
            work_cutoff,
        )
        return result

    def promote_grades(self, today: date | None = None) -> Optional[int]:
        """Advance every student one grade, once per calendar year.

        Returns the number of students promoted, or None when this year's
        promotion already ran.
        """
        year = self._today(today).year
        done = self._maintenance.get_setting(constants.LAST_PROMOTION_YEAR_KEY)
        try:
            done_year = int(done) if done is not None else None
        except ValueError:
            logger.warning("Ignoring malformed %s=%r", constants.LAST_PROMOTION_YEAR_KEY, done)
            done_year = None
        if done_year is not None and done_year >= year:
            return None

        changes = {}
        for user_id, grade in self._maintenance.list_student_grades():
            new_grade = next_grade(grade)
            if new_grade and new_grade != grade:
                changes[user_id] = new_grade

        if not self._maintenance.apply_grade_promotion(
            year, changes, watermark_key=constants.LAST_PROMOTION_YEAR_KEY
        ):
            return None
        logger.info("Promoted %d students for %d", len(changes), year)
        return len(changes)
