from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import phone_digits
from ..core.constants import DEFAULT_CENTER_TIMEZONE
from ..core.enums import DeliveryStatus, MessageType, NotificationEvent, RecipientRole
from ..staff.model import StaffCheckInSettings
from ..users.center_repository import CenterRepository
from ..users.model import User
from .credentials import CredentialResolver
from .gateway import SendResult, SmsGateway
from .repository import MessageTemplateRepository, NotificationLogRepository
from .templates import TEMPLATE_TYPES, render_for_event

logger = logging.getLogger(__name__)

Runner = Callable[[Callable[[], None]], None]

MESSAGE_TYPES = {
    NotificationEvent.CHECK_IN: MessageType.ATTENDANCE_CHECKIN,
    NotificationEvent.LATE: MessageType.LATE,
    NotificationEvent.CHECK_OUT: MessageType.CHECK_OUT,
    NotificationEvent.STAFF_CHECK_IN: MessageType.STAFF_CHECKIN,
}


def daemon_thread_runner(job: Callable[[], None]) -> None:
    threading.Thread(target=job, name="notification-dispatch", daemon=True).start()


def pick_guardian(student: User) -> tuple[Optional[str], Optional[RecipientRole]]:
    """Mother first, then father."""
    if student.mother_phone and phone_digits(student.mother_phone):
        return student.mother_phone, RecipientRole.MOTHER
    if student.father_phone and phone_digits(student.father_phone):
        return student.father_phone, RecipientRole.FATHER
    return None, None


class NotificationDispatcher:
    """Fire-and-forget SMS delivery with one log entry per gateway attempt.

    dispatch() only schedules work on the runner and returns. Failures inside
    a delivery are logged and never reach the caller.
    """

    def __init__(
        self,
        gateway: SmsGateway,
        credentials: CredentialResolver,
        templates: MessageTemplateRepository,
        logs: NotificationLogRepository,
        attendance: AttendanceRepository,
        centers: CenterRepository,
        *,
        runner: Optional[Runner] = None,
        tz_name: str = DEFAULT_CENTER_TIMEZONE,
    ):
        self._gateway = gateway
        self._credentials = credentials
        self._templates = templates
        self._logs = logs
        self._attendance = attendance
        self._centers = centers
        self._runner = runner or daemon_thread_runner
        self._tz_name = tz_name

    def dispatch(self, event: NotificationEvent, student: User, record: AttendanceRecord) -> bool:
        """Schedule a guardian SMS. False when the student has no guardian phone."""
        event = NotificationEvent(event)
        phone, role = pick_guardian(student)
        if not phone:
            logger.info("No guardian phone for student %s; %s not sent", student.user_id, event.value)
            return False

        self._runner(lambda: self._guarded(self._deliver_to_guardian, event, student, record, phone, role))
        return True

    def dispatch_staff_check_in(
        self,
        teacher: User,
        center_id: int,
        settings: Optional[StaffCheckInSettings],
        at: Optional[datetime] = None,
    ) -> int:
        """Schedule staff check-in SMS. Returns how many recipients were scheduled.

        With settings, the configured recipients get the message; a legacy
        phone match sends it to the teacher's own phone.
        """
        at = at or now_local(self._tz_name)
        if settings is not None:
            recipients = [(p, RecipientRole.ADMIN) for p in settings.recipients if phone_digits(p)]
            template = settings.message_template
        else:
            recipients = [(teacher.phone, RecipientRole.TEACHER)] if phone_digits(teacher.phone) else []
            template = None

        for phone, role in recipients:
            self._runner(
                lambda phone=phone, role=role: self._guarded(
                    self._deliver_to_staff_recipient, teacher, center_id, template, phone, role, at
                )
            )
        return len(recipients)

    def _guarded(self, fn, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Notification delivery failed")

    def _deliver_to_guardian(
        self,
        event: NotificationEvent,
        student: User,
        record: AttendanceRecord,
        phone: str,
        role: RecipientRole,
    ) -> None:
        if event == NotificationEvent.CHECK_OUT:
            at = record.check_out_at
        else:
            at = record.check_in_at
        at = at or now_local(self._tz_name)

        text = render_for_event(
            event,
            name=student.full_name,
            at=at,
            center_name=self._center_name(record.center_id),
            custom_template=self._templates.get_active_body(record.center_id, TEMPLATE_TYPES[event]),
        )
        result = self._send(record.center_id, phone, text)
        if result is None:
            return
        self._append_log(
            attendance_record_id=record.attendance_id,
            center_id=record.center_id,
            phone=phone,
            role=role,
            event=event,
            result=result,
        )

        if result.success:
            logger.info("%s notification sent for student %s", event.value, student.user_id)
            try:
                self._attendance.mark_notification_sent(
                    record.attendance_id, event, at=now_local(self._tz_name)
                )
            except Exception:
                logger.exception("Could not flag notification on record %s", record.attendance_id)
        else:
            logger.warning(
                "%s notification failed for student %s: %s", event.value, student.user_id, result.error
            )

    def _deliver_to_staff_recipient(
        self,
        teacher: User,
        center_id: int,
        template: Optional[str],
        phone: str,
        role: RecipientRole,
        at: datetime,
    ) -> None:
        text = render_for_event(
            NotificationEvent.STAFF_CHECK_IN,
            name=teacher.full_name,
            at=at,
            center_name=self._center_name(center_id),
            custom_template=template,
        )
        result = self._send(center_id, phone, text)
        if result is None:
            return
        self._append_log(
            attendance_record_id=None,
            center_id=center_id,
            phone=phone,
            role=role,
            event=NotificationEvent.STAFF_CHECK_IN,
            result=result,
        )

    def _center_name(self, center_id: int) -> Optional[str]:
        center = self._centers.get_by_id(center_id)
        return center.name if center else None

    def _send(self, center_id: int, phone: str, text: str) -> Optional[SendResult]:
        """None when no gateway call was made; nothing gets logged then."""
        try:
            credentials = self._credentials.get(center_id)
        except Exception:
            logger.exception("Credential lookup failed for center %s", center_id)
            return None
        if credentials is None:
            logger.warning(
                "SMS gateway not configured for center %s; message to %s skipped", center_id, phone_digits(phone)
            )
            return None
        return self._gateway.send(credentials, to=phone, text=text)

    def _append_log(
        self,
        *,
        attendance_record_id: Optional[int],
        center_id: int,
        phone: str,
        role: RecipientRole,
        event: NotificationEvent,
        result: SendResult,
    ) -> None:
        try:
            self._logs.append(
                attendance_record_id=attendance_record_id,
                center_id=center_id,
                recipient_phone=phone_digits(phone),
                recipient_role=role,
                message_type=MESSAGE_TYPES[event],
                status=DeliveryStatus.SENT if result.success else DeliveryStatus.FAILED,
                error_message=result.error,
                sent_at=now_local(self._tz_name),
            )
        except Exception:
            logger.exception("Could not write notification log for %s", phone_digits(phone))
