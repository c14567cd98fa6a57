from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_id, require_id
from ..core import constants
from ..core.enums import AttendanceStatus, NotificationEvent, Role
from ..core.exceptions import AlreadyProcessedError, DuplicateRecordError, NotFoundError, ValidationError
from ..notifications.dispatcher import NotificationDispatcher, pick_guardian
from ..notifications.repository import NotificationLogRepository
from ..users.model import User
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

RESENDABLE_EVENTS = (NotificationEvent.CHECK_IN, NotificationEvent.LATE, NotificationEvent.CHECK_OUT)


class AttendanceService:
    """Daily attendance ledger keyed by (student, center-local day, class or center scope).

    At most one record exists per key; the database's unique key backs this up
    when two pad taps race.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        dispatcher: NotificationDispatcher | None = None,
        logs: NotificationLogRepository | None = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        tz_name: str = constants.DEFAULT_CENTER_TIMEZONE,
    ):
        self._attendance = attendance
        self._users = users
        self._dispatcher = dispatcher
        self._logs = logs
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._tz_name = tz_name

    def _now(self, now: datetime | None) -> datetime:
        return now or now_local(self._tz_name)

    def _get_student(self, student_id: int) -> User:
        student = self._users.get_by_id(student_id)
        if not student or student.role != Role.STUDENT:
            raise NotFoundError("Student not found")
        return student

    def _notify(self, event: NotificationEvent, student: User, record: AttendanceRecord) -> None:
        if self._dispatcher is None:
            return
        try:
            self._dispatcher.dispatch(event, student, record)
        except Exception:
            # The ledger mutation is already committed.
            logger.exception("Could not schedule %s notification for record %s", event.value, record.attendance_id)

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def check_in(
        self,
        center_id: int,
        student_id: int,
        class_id: Optional[int] = None,
        *,
        is_late: bool = False,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        center_id = require_id(center_id, "centerId")
        student_id = require_id(student_id, "studentId")
        class_id = optional_id(class_id, "classId")
        now = self._now(now)
        today = now.date()

        student = self._get_student(student_id)
        decision = self._factory.for_checkin(is_late=is_late).decide_checkin()

        existing = self._attendance.get_for_scope(student_id, today, class_id)
        if existing:
            if existing.has_timestamps:
                raise AlreadyProcessedError(constants.MSG_ALREADY_CHECKED_IN)
            # Roll-call row without timestamps: this tap is the real arrival.
            if not self._attendance.set_check_in(
                existing.attendance_id, check_in_at=now, was_late=decision.was_late, status=decision.status
            ):
                raise AlreadyProcessedError(constants.MSG_ALREADY_CHECKED_IN)
            record = self._reload(existing.attendance_id)
        else:
            try:
                record = self._attendance.create(
                    student_id=student_id,
                    center_id=center_id,
                    class_id=class_id,
                    check_in_date=today,
                    check_in_at=now,
                    check_out_at=None,
                    was_late=decision.was_late,
                    status=decision.status,
                )
            except DuplicateRecordError:
                raise AlreadyProcessedError(constants.MSG_ALREADY_CHECKED_IN)

        logger.info("Student %s checked in (center=%s class=%s)", student_id, center_id, class_id)
        self._notify(decision.event, student, record)
        return record

    def check_out(
        self,
        center_id: int,
        student_id: int,
        class_id: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        center_id = require_id(center_id, "centerId")
        student_id = require_id(student_id, "studentId")
        class_id = optional_id(class_id, "classId")
        now = self._now(now)
        today = now.date()

        student = self._get_student(student_id)

        existing = self._attendance.get_for_scope(student_id, today, class_id)
        if existing is None:
            try:
                # Check-out without check-in: both timestamps carry the check-out time.
                record = self._attendance.create(
                    student_id=student_id,
                    center_id=center_id,
                    class_id=class_id,
                    check_in_date=today,
                    check_in_at=now,
                    check_out_at=now,
                    was_late=False,
                    status=AttendanceStatus.PRESENT,
                )
            except DuplicateRecordError:
                existing = self._attendance.get_for_scope(student_id, today, class_id)
                if existing is None:
                    raise
                record = self._check_out_existing(existing, now)
        else:
            record = self._check_out_existing(existing, now)

        logger.info("Student %s checked out (center=%s class=%s)", student_id, center_id, class_id)
        self._notify(NotificationEvent.CHECK_OUT, student, record)
        return record

    def _check_out_existing(self, existing: AttendanceRecord, now: datetime) -> AttendanceRecord:
        if existing.check_out_at is not None:
            raise AlreadyProcessedError(constants.MSG_ALREADY_CHECKED_OUT)
        check_out_at = max(now, existing.check_in_at) if existing.check_in_at else now
        if not self._attendance.set_check_out(existing.attendance_id, check_out_at=check_out_at):
            raise AlreadyProcessedError(constants.MSG_ALREADY_CHECKED_OUT)
        return self._reload(existing.attendance_id)

    def manual_status_update(
        self,
        student_id: int,
        center_id: int,
        class_id: Optional[int],
        status: str,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Roll-call status change by staff. Never sends a notification."""
        student_id = require_id(student_id, "studentId")
        center_id = require_id(center_id, "centerId")
        class_id = optional_id(class_id, "classId")
        try:
            new_status = AttendanceStatus(str(status or "").strip().lower())
        except ValueError:
            raise ValidationError("Invalid status. Must be: pending, present, late, or absent")
        was_late = new_status == AttendanceStatus.LATE
        today = self._now(now).date()

        self._get_student(student_id)
        existing = self._attendance.get_for_scope(student_id, today, class_id)
        if existing is None:
            try:
                return self._attendance.create(
                    student_id=student_id,
                    center_id=center_id,
                    class_id=class_id,
                    check_in_date=today,
                    check_in_at=None,
                    check_out_at=None,
                    was_late=was_late,
                    status=new_status,
                )
            except DuplicateRecordError:
                existing = self._attendance.get_for_scope(student_id, today, class_id)
                if existing is None:
                    raise

        self._attendance.update_status(existing.attendance_id, status=new_status, was_late=was_late)
        return self._reload(existing.attendance_id)

    def manual_check_in(
        self,
        student_id: int,
        center_id: int,
        class_id: Optional[int] = None,
        is_late: bool = False,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Teacher roll-call check-in: upsert the day's record and notify the guardian."""
        student_id = require_id(student_id, "studentId")
        center_id = require_id(center_id, "centerId")
        class_id = optional_id(class_id, "classId")
        now = self._now(now)
        today = now.date()

        student = self._get_student(student_id)
        decision = self._factory.for_checkin(is_late=bool(is_late)).decide_checkin()

        existing = self._attendance.get_for_scope(student_id, today, class_id)
        if existing is None:
            try:
                record = self._attendance.create(
                    student_id=student_id,
                    center_id=center_id,
                    class_id=class_id,
                    check_in_date=today,
                    check_in_at=now,
                    check_out_at=None,
                    was_late=decision.was_late,
                    status=decision.status,
                )
            except DuplicateRecordError:
                existing = self._attendance.get_for_scope(student_id, today, class_id)
                if existing is None:
                    raise
        if existing is not None:
            if existing.has_timestamps:
                self._attendance.update_status(
                    existing.attendance_id, status=decision.status, was_late=decision.was_late
                )
            else:
                self._attendance.set_check_in(
                    existing.attendance_id, check_in_at=now, was_late=decision.was_late, status=decision.status
                )
            record = self._reload(existing.attendance_id)

        self._notify(decision.event, student, record)
        return record

    def resend_notification(
        self,
        student_id: int,
        center_id: int,
        class_id: Optional[int] = None,
        event: str | NotificationEvent = NotificationEvent.CHECK_IN,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        student_id = require_id(student_id, "studentId")
        center_id = require_id(center_id, "centerId")
        class_id = optional_id(class_id, "classId")
        try:
            event = NotificationEvent(event)
        except ValueError:
            raise ValidationError("Unknown notification type")
        if event not in RESENDABLE_EVENTS:
            raise ValidationError("Unknown notification type")

        student = self._get_student(student_id)
        phone, _ = pick_guardian(student)
        if not phone:
            raise ValidationError("No guardian phone number registered")

        record = self._attendance.get_for_scope(student_id, self._now(now).date(), class_id)
        if not record or record.center_id != center_id:
            raise NotFoundError("No attendance record for today")

        self._notify(event, student, record)
        return record

    def list_records_for_date(self, center_id: int, day: date):
        return list(self._attendance.list_for_date(require_id(center_id, "centerId"), day))

    def list_records_for_student(
        self,
        student_id: int,
        start: date | None = None,
        end: date | None = None,
        *,
        now: datetime | None = None,
    ):
        student_id = require_id(student_id, "studentId")
        end = end or self._now(now).date()
        start = start or end - timedelta(days=constants.DEFAULT_HISTORY_DAYS)
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return list(self._attendance.list_for_student(student_id, start, end))

    def notification_logs(self, attendance_id: int):
        attendance_id = require_id(attendance_id, "attendanceId")
        if self._logs is None:
            return []
        return list(self._logs.list_for_record(attendance_id))
