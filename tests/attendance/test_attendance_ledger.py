from datetime import date, timedelta

import pytest

from src.center_attendance.center_attendance.attendance.service import AttendanceService
from src.center_attendance.center_attendance.core import constants
from src.center_attendance.center_attendance.core.enums import (
    AttendanceStatus,
    DeliveryStatus,
    MessageType,
    NotificationEvent,
    Role,
)
from src.center_attendance.center_attendance.core.exceptions import (
    AlreadyProcessedError,
    DuplicateRecordError,
    NotFoundError,
    ValidationError,
)


def test_check_in_creates_record_and_notifies(ledger, gateway, logs, attendance, fixed_now):
    record = ledger.check_in(1, 10, now=fixed_now)

    assert record.check_in_date == fixed_now.date()
    assert record.check_in_at == fixed_now
    assert record.status == AttendanceStatus.PRESENT
    assert record.was_late is False
    assert [s["to"] for s in gateway.sent] == ["010-3333-4444"]
    assert "김민수" in gateway.sent[0]["text"]
    assert "오후 03:05" in gateway.sent[0]["text"]
    assert len(logs.entries) == 1
    assert logs.entries[0].message_type == MessageType.ATTENDANCE_CHECKIN
    assert logs.entries[0].recipient_phone == "01033334444"
    assert attendance.get_by_id(record.attendance_id).check_in_notification_sent is True


def test_second_check_in_same_scope_is_rejected(ledger, gateway, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    with pytest.raises(AlreadyProcessedError) as exc:
        ledger.check_in(1, 10, now=fixed_now + timedelta(minutes=5))

    assert str(exc.value) == constants.MSG_ALREADY_CHECKED_IN
    assert len(gateway.sent) == 1


def test_class_scopes_are_independent(ledger, attendance, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)
    ledger.check_in(1, 10, 100, now=fixed_now)

    assert len(attendance.rows) == 2


def test_late_check_in(ledger, logs, fixed_now):
    record = ledger.check_in(1, 10, is_late=True, now=fixed_now)

    assert record.status == AttendanceStatus.LATE
    assert record.was_late is True
    assert logs.entries[0].message_type == MessageType.LATE


def test_check_in_next_day_is_a_new_record(ledger, fixed_now):
    first = ledger.check_in(1, 10, now=fixed_now)
    second = ledger.check_in(1, 10, now=fixed_now + timedelta(days=1))

    assert first.attendance_id != second.attendance_id


def test_check_in_unknown_student(ledger, fixed_now):
    with pytest.raises(NotFoundError):
        ledger.check_in(1, 999, now=fixed_now)


def test_check_in_rejects_staff_id(ledger, fixed_now):
    with pytest.raises(NotFoundError):
        ledger.check_in(1, 20, now=fixed_now)


def test_concurrent_insert_maps_to_already_checked_in(users, fixed_now):
    class RacingAttendance:
        def get_for_scope(self, *args):
            return None

        def create(self, **kwargs):
            raise DuplicateRecordError("Duplicate entry")

    service = AttendanceService(RacingAttendance(), users)

    with pytest.raises(AlreadyProcessedError):
        service.check_in(1, 10, now=fixed_now)


def test_check_out_after_check_in(ledger, gateway, logs, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    record = ledger.check_out(1, 10, now=fixed_now + timedelta(hours=2))

    assert record.check_out_at == fixed_now + timedelta(hours=2)
    assert record.check_out_at >= record.check_in_at
    assert [e.message_type for e in logs.entries] == [MessageType.ATTENDANCE_CHECKIN, MessageType.CHECK_OUT]
    assert "하원" in gateway.sent[-1]["text"]


def test_check_out_never_precedes_check_in(ledger, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    record = ledger.check_out(1, 10, now=fixed_now - timedelta(minutes=1))

    assert record.check_out_at == record.check_in_at


def test_check_out_only_once(ledger, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)
    ledger.check_out(1, 10, now=fixed_now + timedelta(hours=1))

    with pytest.raises(AlreadyProcessedError) as exc:
        ledger.check_out(1, 10, now=fixed_now + timedelta(hours=2))

    assert str(exc.value) == constants.MSG_ALREADY_CHECKED_OUT


def test_check_out_without_check_in_uses_sentinel(ledger, fixed_now):
    record = ledger.check_out(1, 10, now=fixed_now)

    assert record.check_in_at == record.check_out_at == fixed_now
    assert record.is_check_out_only


def test_check_in_after_check_out_only_is_rejected(ledger, fixed_now):
    ledger.check_out(1, 10, now=fixed_now)

    with pytest.raises(AlreadyProcessedError):
        ledger.check_in(1, 10, now=fixed_now + timedelta(minutes=1))


def test_check_in_fills_roll_call_record(ledger, attendance, fixed_now):
    ledger.manual_status_update(10, 1, None, "absent", now=fixed_now)

    record = ledger.check_in(1, 10, now=fixed_now)

    assert len(attendance.rows) == 1
    assert record.check_in_at == fixed_now
    assert record.status == AttendanceStatus.PRESENT


def test_manual_status_update_never_notifies(ledger, gateway, logs, fixed_now):
    record = ledger.manual_status_update(10, 1, None, "LATE", now=fixed_now)

    assert record.status == AttendanceStatus.LATE
    assert record.was_late is True
    assert record.check_in_at is None
    assert gateway.sent == []
    assert logs.entries == []


def test_manual_status_update_existing_record(ledger, gateway, fixed_now):
    ledger.check_in(1, 10, is_late=True, now=fixed_now)

    record = ledger.manual_status_update(10, 1, None, "present", now=fixed_now)

    assert record.status == AttendanceStatus.PRESENT
    assert record.was_late is False
    assert record.check_in_at == fixed_now
    assert len(gateway.sent) == 1


def test_manual_status_update_invalid_status(ledger, fixed_now):
    with pytest.raises(ValidationError):
        ledger.manual_status_update(10, 1, None, "sick", now=fixed_now)


def test_manual_check_in_upserts_and_notifies(ledger, logs, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    record = ledger.manual_check_in(10, 1, None, True, now=fixed_now + timedelta(minutes=3))

    assert record.status == AttendanceStatus.LATE
    assert record.check_in_at == fixed_now
    assert [e.message_type for e in logs.entries] == [MessageType.ATTENDANCE_CHECKIN, MessageType.LATE]


def test_manual_check_in_creates_record(ledger, attendance, fixed_now):
    record = ledger.manual_check_in(10, 1, 100, now=fixed_now)

    assert record.class_id == 100
    assert record.status == AttendanceStatus.PRESENT
    assert len(attendance.rows) == 1


def test_resend_notification(ledger, gateway, logs, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    ledger.resend_notification(10, 1, None, "late", now=fixed_now)

    assert len(gateway.sent) == 2
    assert logs.entries[-1].message_type == MessageType.LATE


def test_resend_without_record(ledger, fixed_now):
    with pytest.raises(NotFoundError):
        ledger.resend_notification(10, 1, None, NotificationEvent.CHECK_IN, now=fixed_now)


def test_resend_without_guardian_phone(ledger, users, fixed_now):
    users.add(user_id=11, full_name="보호자없음", role=Role.STUDENT, center_id=1)

    with pytest.raises(ValidationError):
        ledger.resend_notification(11, 1, None, NotificationEvent.CHECK_IN, now=fixed_now)


def test_resend_rejects_unknown_type(ledger, fixed_now):
    with pytest.raises(ValidationError):
        ledger.resend_notification(10, 1, None, "staff_check_in", now=fixed_now)


def test_no_guardian_phone_means_no_attempt_and_no_log(ledger, users, gateway, logs, fixed_now):
    users.add(user_id=11, full_name="보호자없음", role=Role.STUDENT, center_id=1)

    record = ledger.check_in(1, 11, now=fixed_now)

    assert record.check_in_at == fixed_now
    assert gateway.sent == []
    assert logs.entries == []


def test_father_phone_used_when_mother_missing(ledger, users, gateway, logs, fixed_now):
    users.add(user_id=11, full_name="아빠연락", role=Role.STUDENT, center_id=1, father_phone="010-7777-8888")

    ledger.check_in(1, 11, now=fixed_now)

    assert gateway.sent[0]["to"] == "010-7777-8888"
    assert logs.entries[0].recipient_role.value == "father"


def test_failed_delivery_is_logged_and_record_kept(ledger, gateway, logs, attendance, fixed_now):
    from src.center_attendance.center_attendance.notifications.gateway import SendResult

    gateway.result = SendResult(False, "HTTP 500: boom")

    record = ledger.check_in(1, 10, now=fixed_now)

    assert logs.entries[0].status == DeliveryStatus.FAILED
    assert logs.entries[0].error_message == "HTTP 500: boom"
    assert attendance.get_by_id(record.attendance_id).check_in_notification_sent is False


def test_history_defaults_to_last_thirty_days(ledger, attendance, fixed_now):
    attendance.add(student_id=10, center_id=1, check_in_date=date(2025, 3, 1), check_in_at=None, check_out_at=None)
    attendance.add(student_id=10, center_id=1, check_in_date=date(2025, 1, 1), check_in_at=None, check_out_at=None)

    rows = ledger.list_records_for_student(10, now=fixed_now)

    assert [r.record.check_in_date for r in rows] == [date(2025, 3, 1)]


def test_history_rejects_inverted_range(ledger):
    with pytest.raises(ValidationError):
        ledger.list_records_for_student(10, date(2025, 3, 2), date(2025, 3, 1))


def test_records_for_date(ledger, fixed_now):
    ledger.check_in(1, 10, now=fixed_now)

    rows = ledger.list_records_for_date(1, fixed_now.date())

    assert [r.student_name for r in rows] == ["김민수"]


def test_notification_logs_for_record(ledger, fixed_now):
    record = ledger.check_in(1, 10, now=fixed_now)
    ledger.check_out(1, 10, now=fixed_now + timedelta(hours=1))

    entries = ledger.notification_logs(record.attendance_id)

    assert [e.message_type for e in entries] == [MessageType.CHECK_OUT, MessageType.ATTENDANCE_CHECKIN]


def test_dispatch_failure_does_not_undo_check_in(attendance, users, fixed_now):
    class BrokenDispatcher:
        def dispatch(self, *args):
            raise RuntimeError("queue full")

    service = AttendanceService(attendance, users, BrokenDispatcher())

    record = service.check_in(1, 10, now=fixed_now)

    assert attendance.get_by_id(record.attendance_id) is not None
