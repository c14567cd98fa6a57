from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from ..codes.registry import CodeRegistry
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import phone_digits, require_code, require_id
from ..core import constants
from ..core.enums import STAFF_ROLES, OwnerKind
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import StaffCheckInSettings, TeacherWorkRecord, WorkDaySummary
from .repository import StaffSettingsRepository, WorkRecordRepository

logger = logging.getLogger(__name__)

MAX_RECIPIENTS = 2


@dataclass(frozen=True)
class PunchResult:
    record: TeacherWorkRecord
    action: str  # "check_in" | "check_out"


class StaffService:
    """Staff check-in codes and daily work records."""

    def __init__(
        self,
        settings: StaffSettingsRepository,
        work_records: WorkRecordRepository,
        registry: CodeRegistry,
        users: UserRepository,
        *,
        tz_name: str = constants.DEFAULT_CENTER_TIMEZONE,
    ):
        self._settings = settings
        self._work_records = work_records
        self._registry = registry
        self._users = users
        self._tz_name = tz_name

    def _require_staff(self, teacher_id: int):
        teacher = self._users.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Staff member not found")
        if teacher.role not in STAFF_ROLES:
            raise ValidationError("Only teachers and principals can have a check-in code")
        return teacher

    def save_settings(
        self,
        teacher_id: int,
        center_id: int,
        check_in_code: str,
        recipients: Iterable[str] = (),
        message_template: Optional[str] = None,
        is_active: bool = True,
    ) -> StaffCheckInSettings:
        teacher_id = require_id(teacher_id, "teacherId")
        center_id = require_id(center_id, "centerId")
        code = require_code(check_in_code)
        cleaned = [str(p).strip() for p in (recipients or []) if p and phone_digits(str(p))]
        if len(cleaned) > MAX_RECIPIENTS:
            raise ValidationError(f"At most {MAX_RECIPIENTS} notification recipients are allowed")
        self._require_staff(teacher_id)

        if is_active:
            # Shares the student namespace: raises CollisionError before anything is saved.
            self._registry.register_code(center_id, teacher_id, OwnerKind.STAFF, proposed_code=code)
        else:
            self._registry.deactivate_for_owner(center_id, teacher_id, OwnerKind.STAFF)

        saved = self._settings.upsert(
            teacher_id=teacher_id,
            center_id=center_id,
            check_in_code=code,
            recipients=cleaned,
            message_template=(message_template or "").strip() or None,
            is_active=bool(is_active),
        )
        logger.info("Saved check-in settings for staff %s in center %s", teacher_id, center_id)
        return saved

    def get_settings(self, teacher_id: int, center_id: int) -> Optional[StaffCheckInSettings]:
        return self._settings.get(require_id(teacher_id, "teacherId"), require_id(center_id, "centerId"))

    def list_settings(self, center_id: int) -> list[StaffCheckInSettings]:
        return list(self._settings.list_for_center(require_id(center_id, "centerId")))

    def punch(self, teacher_id: int, center_id: int, *, now: datetime | None = None) -> PunchResult:
        """First punch of the day is the check-in; every later punch moves the check-out."""
        teacher_id = require_id(teacher_id, "teacherId")
        center_id = require_id(center_id, "centerId")
        now = now or now_local(self._tz_name)
        self._require_staff(teacher_id)

        existing = self._work_records.get_for_day(teacher_id, center_id, now.date())
        if existing is None:
            try:
                record = self._work_records.create_check_in(
                    teacher_id=teacher_id, center_id=center_id, work_date=now.date(), at=now
                )
                logger.info("Staff %s work check-in at center %s", teacher_id, center_id)
                return PunchResult(record=record, action="check_in")
            except DuplicateRecordError:
                existing = self._work_records.get_for_day(teacher_id, center_id, now.date())
                if existing is None:
                    raise

        check_in_at = existing.check_in_at or now
        check_out_at = max(now, check_in_at)
        minutes = int((check_out_at - check_in_at).total_seconds() // 60)
        self._work_records.set_check_out(existing.record_id, at=check_out_at, work_minutes=minutes)
        logger.info("Staff %s work check-out at center %s (%d min)", teacher_id, center_id, minutes)

        updated = self._work_records.get_for_day(teacher_id, center_id, now.date()) or existing
        return PunchResult(record=updated, action="check_out")

    def list_work_records(self, center_id: int, start: date, end: date) -> list[TeacherWorkRecord]:
        center_id = require_id(center_id, "centerId")
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return list(self._work_records.list_for_range(center_id, start, end))

    def work_days_for_month(self, center_id: int, year_month: str) -> list[WorkDaySummary]:
        center_id = require_id(center_id, "centerId")
        try:
            start, end = month_bounds(year_month)
        except (TypeError, ValueError):
            raise ValidationError("Month must be in YYYY-MM format")

        days: dict[int, int] = {}
        minutes: dict[int, int] = {}
        for r in self._work_records.list_for_range(center_id, start, end):
            if r.check_in_at is None:
                continue
            days[r.teacher_id] = days.get(r.teacher_id, 0) + 1
            minutes[r.teacher_id] = minutes.get(r.teacher_id, 0) + int(r.work_minutes or 0)

        names = {u.user_id: u.full_name for u in self._users.list_for_center(center_id, roles=STAFF_ROLES)}
        out = []
        for teacher_id in sorted(days):
            name = names.get(teacher_id)
            if name is None:
                user = self._users.get_by_id(teacher_id)
                name = user.full_name if user else str(teacher_id)
            out.append(
                WorkDaySummary(
                    teacher_id=teacher_id,
                    full_name=name,
                    work_days=days[teacher_id],
                    total_minutes=minutes[teacher_id],
                )
            )
        return out
