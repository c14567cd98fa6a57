from __future__ import annotations

from datetime import datetime

import pytest

from src.center_attendance.center_attendance.attendance.pad_service import AttendancePadService
from src.center_attendance.center_attendance.attendance.service import AttendanceService
from src.center_attendance.center_attendance.classes.model import ClassInfo
from src.center_attendance.center_attendance.codes.registry import CodeRegistry
from src.center_attendance.center_attendance.codes.resolver import IdentityResolver
from src.center_attendance.center_attendance.core.enums import Role
from src.center_attendance.center_attendance.notifications.credentials import SmsCredentials
from src.center_attendance.center_attendance.notifications.dispatcher import NotificationDispatcher
from src.center_attendance.center_attendance.staff.service import StaffService
from src.center_attendance.center_attendance.users.center_model import Center

from tests.fakes import (
    FakeAttendanceRepo,
    FakeCentersRepo,
    FakeClassesRepo,
    FakeCodesRepo,
    FakeCredentialResolver,
    FakeGateway,
    FakeLogsRepo,
    FakeStaffSettingsRepo,
    FakeTemplatesRepo,
    FakeUsersRepo,
    FakeWorkRecordsRepo,
    sync_runner,
)

CENTER_ID = 1


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 15, 5)


@pytest.fixture
def users():
    repo = FakeUsersRepo()
    repo.add(
        user_id=10,
        full_name="김민수",
        role=Role.STUDENT,
        center_id=CENTER_ID,
        phone="010-1111-2222",
        mother_phone="010-3333-4444",
        grade="중2",
    )
    repo.add(user_id=20, full_name="박선생", role=Role.TEACHER, center_id=CENTER_ID, phone="010-5555-6789")
    return repo


@pytest.fixture
def student(users):
    return users.get_by_id(10)


@pytest.fixture
def teacher(users):
    return users.get_by_id(20)


@pytest.fixture
def centers():
    return FakeCentersRepo(Center(CENTER_ID, "목동센터"), Center(2, "DMC센터"))


@pytest.fixture
def codes(staff_settings):
    return FakeCodesRepo(staff_settings)


@pytest.fixture
def staff_settings():
    return FakeStaffSettingsRepo()


@pytest.fixture
def work_records():
    return FakeWorkRecordsRepo()


@pytest.fixture
def classes():
    repo = FakeClassesRepo(ClassInfo(100, CENTER_ID, "중등 심화", "A룸"), ClassInfo(101, CENTER_ID, "폐강반", is_archived=True))
    repo.enroll(10, 100)
    repo.enroll(10, 101)
    return repo


@pytest.fixture
def attendance(users):
    return FakeAttendanceRepo(users)


@pytest.fixture
def logs():
    return FakeLogsRepo()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def credentials():
    return FakeCredentialResolver(SmsCredentials("key", "secret", "0212345678"))


@pytest.fixture
def templates():
    return FakeTemplatesRepo()


@pytest.fixture
def dispatcher(gateway, credentials, templates, logs, attendance, centers):
    return NotificationDispatcher(
        gateway, credentials, templates, logs, attendance, centers, runner=sync_runner, tz_name="Asia/Seoul"
    )


@pytest.fixture
def registry(codes, users):
    return CodeRegistry(codes, users)


@pytest.fixture
def resolver(codes, users):
    return IdentityResolver(codes, users)


@pytest.fixture
def ledger(attendance, users, dispatcher, logs):
    return AttendanceService(attendance, users, dispatcher, logs, tz_name="Asia/Seoul")


@pytest.fixture
def pad(resolver, ledger, users, classes, staff_settings, dispatcher):
    return AttendancePadService(resolver, ledger, users, classes, staff_settings, dispatcher, tz_name="Asia/Seoul")


@pytest.fixture
def staff_service(staff_settings, work_records, registry, users):
    return StaffService(staff_settings, work_records, registry, users, tz_name="Asia/Seoul")
