from datetime import date, datetime, timedelta

import pytest

from src.center_attendance.center_attendance.core.enums import OwnerKind
from src.center_attendance.center_attendance.core.exceptions import CollisionError, NotFoundError, ValidationError

NOW = datetime(2025, 3, 10, 9, 0, 30)


def test_save_settings_registers_code(staff_service, codes):
    saved = staff_service.save_settings(20, 1, "8080", recipients=["010-1000-2000", ""])

    assert saved.check_in_code == "8080"
    assert saved.recipients == ("010-1000-2000",)
    assert codes.find_active(1, "8080").owner_kind == OwnerKind.STAFF


def test_save_settings_collides_with_student_code(staff_service, registry, staff_settings):
    registry.register_code(1, 10, OwnerKind.STUDENT, "8080")

    with pytest.raises(CollisionError):
        staff_service.save_settings(20, 1, "8080")

    assert staff_settings.get(20, 1) is None


def test_save_settings_limits_recipients(staff_service):
    with pytest.raises(ValidationError):
        staff_service.save_settings(20, 1, "8080", recipients=["010-1", "010-2", "010-3"])


def test_save_settings_rejects_students(staff_service):
    with pytest.raises(ValidationError):
        staff_service.save_settings(10, 1, "8080")


def test_save_settings_unknown_staff(staff_service):
    with pytest.raises(NotFoundError):
        staff_service.save_settings(404, 1, "8080")


def test_changing_code_releases_the_old_one(staff_service, codes):
    staff_service.save_settings(20, 1, "8080")
    staff_service.save_settings(20, 1, "9090")

    assert codes.find_active(1, "8080") is None
    assert staff_service.get_settings(20, 1).check_in_code == "9090"
    assert len(staff_service.list_settings(1)) == 1


def test_deactivating_settings_frees_the_code(staff_service, codes):
    staff_service.save_settings(20, 1, "8080")
    staff_service.save_settings(20, 1, "8080", is_active=False)

    assert codes.find_active(1, "8080") is None
    assert staff_service.get_settings(20, 1).is_active is False


def test_punch_check_in_then_check_out(staff_service):
    first = staff_service.punch(20, 1, now=NOW)
    second = staff_service.punch(20, 1, now=NOW + timedelta(hours=8, seconds=45))

    assert first.action == "check_in"
    assert first.record.check_in_at == NOW
    assert second.action == "check_out"
    assert second.record.check_out_at == NOW + timedelta(hours=8, seconds=45)
    assert second.record.work_minutes == 480


def test_later_punch_moves_check_out(staff_service):
    staff_service.punch(20, 1, now=NOW)
    staff_service.punch(20, 1, now=NOW + timedelta(hours=1))
    last = staff_service.punch(20, 1, now=NOW + timedelta(hours=3))

    assert last.record.work_minutes == 180


def test_punch_rejects_students(staff_service):
    with pytest.raises(ValidationError):
        staff_service.punch(10, 1, now=NOW)


def test_work_days_for_month(staff_service, work_records):
    work_records.add(
        teacher_id=20,
        center_id=1,
        work_date=date(2025, 3, 3),
        check_in_at=datetime(2025, 3, 3, 9),
        check_out_at=datetime(2025, 3, 3, 17),
        work_minutes=480,
    )
    work_records.add(
        teacher_id=20,
        center_id=1,
        work_date=date(2025, 3, 4),
        check_in_at=datetime(2025, 3, 4, 9),
        check_out_at=None,
    )
    work_records.add(
        teacher_id=20,
        center_id=1,
        work_date=date(2025, 4, 1),
        check_in_at=datetime(2025, 4, 1, 9),
        check_out_at=None,
    )

    summary = staff_service.work_days_for_month(1, "2025-03")

    assert [(s.full_name, s.work_days, s.total_minutes) for s in summary] == [("박선생", 2, 480)]


def test_work_days_rejects_bad_month(staff_service):
    with pytest.raises(ValidationError):
        staff_service.work_days_for_month(1, "March")


def test_list_work_records_rejects_inverted_range(staff_service):
    with pytest.raises(ValidationError):
        staff_service.list_work_records(1, date(2025, 3, 2), date(2025, 3, 1))
