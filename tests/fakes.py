"""In-memory repositories and gateway doubles shared by the test suite."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from src.center_attendance.center_attendance.attendance.model import (
    AttendanceRecord,
    AttendanceWithClass,
    AttendanceWithStudent,
)
from src.center_attendance.center_attendance.classes.model import ClassInfo
from src.center_attendance.center_attendance.codes.model import AttendanceCode
from src.center_attendance.center_attendance.core.enums import (
    AttendanceStatus,
    NotificationEvent,
    OwnerKind,
    Role,
)
from src.center_attendance.center_attendance.core.exceptions import DuplicateRecordError
from src.center_attendance.center_attendance.notifications.gateway import SendResult
from src.center_attendance.center_attendance.notifications.model import NotificationLogEntry
from src.center_attendance.center_attendance.staff.model import StaffCheckInSettings, TeacherWorkRecord
from src.center_attendance.center_attendance.users.center_model import Center
from src.center_attendance.center_attendance.users.model import User


def sync_runner(job):
    job()


class FakeUsersRepo:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}
        self.memberships: set[tuple[int, int]] = set()

    def add(self, *, full_name, role=Role.STUDENT, center_id=None, **fields) -> User:
        user_id = fields.pop("user_id", None) or self._next_id
        self._next_id = max(self._next_id, user_id) + 1
        user = User(
            user_id=user_id,
            full_name=full_name,
            username=fields.pop("username", f"user{user_id}"),
            password_hash=fields.pop("password_hash", "x"),
            role=Role(role),
            **fields,
        )
        self.users[user_id] = user
        if center_id is not None:
            self.memberships.add((user_id, center_id))
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    def create_user(self, *, full_name, username, password_hash, role, phone=None, mother_phone=None,
                    father_phone=None, grade=None):
        user = self.add(
            full_name=full_name,
            username=username,
            password_hash=password_hash,
            role=role,
            phone=phone,
            mother_phone=mother_phone,
            father_phone=father_phone,
            grade=grade,
        )
        return user.user_id

    def link_center(self, *, user_id, center_id):
        self.memberships.add((int(user_id), int(center_id)))

    def list_for_center(self, center_id, *, roles):
        allowed = {Role(r) for r in roles}
        return [
            u
            for uid, u in sorted(self.users.items())
            if (uid, center_id) in self.memberships and u.is_active and u.role in allowed
        ]


class FakeCentersRepo:
    def __init__(self, *centers: Center):
        self.centers = {c.center_id: c for c in centers}

    def get_by_id(self, center_id):
        return self.centers.get(int(center_id))

    def list_all(self):
        return list(self.centers.values())


class FakeCodesRepo:
    """Mirrors the unique index on (center_id, code) among active rows.

    STAFF code changes are copied onto the staff settings row, as the MySQL
    repository does inside its transaction.
    """

    def __init__(self, staff_settings: "FakeStaffSettingsRepo | None" = None):
        self._next_id = 1
        self.rows: dict[int, AttendanceCode] = {}
        self._staff_settings = staff_settings

    def _sync_staff(self, owner_id, owner_kind, center_id, **changes):
        if self._staff_settings is None or owner_kind != OwnerKind.STAFF:
            return
        current = self._staff_settings.rows.get((owner_id, center_id))
        if current:
            self._staff_settings.rows[(owner_id, center_id)] = replace(current, **changes)

    def get_by_id(self, code_id):
        return self.rows.get(int(code_id))

    def find_active(self, center_id, code):
        return next(
            (r for r in self.rows.values() if r.is_active and r.center_id == center_id and r.code == code),
            None,
        )

    def find_active_for_owner(self, center_id, owner_id, owner_kind):
        return next(
            (
                r
                for r in self.rows.values()
                if r.is_active and r.center_id == center_id and r.owner_id == owner_id and r.owner_kind == owner_kind
            ),
            None,
        )

    def replace_active(self, *, center_id, owner_id, owner_kind, code):
        clash = self.find_active(center_id, code)
        if clash and not (clash.owner_id == owner_id and clash.owner_kind == owner_kind):
            raise DuplicateRecordError(f"Duplicate entry '{center_id}-{code}-1'")
        self.deactivate_for_owner(center_id, owner_id, owner_kind)
        row = AttendanceCode(
            code_id=self._next_id,
            center_id=center_id,
            owner_id=owner_id,
            owner_kind=OwnerKind(owner_kind),
            code=code,
            is_active=True,
            created_at=datetime(2025, 3, 1, 9, 0),
        )
        self.rows[row.code_id] = row
        self._next_id += 1
        self._sync_staff(owner_id, owner_kind, center_id, check_in_code=code, is_active=True)
        return row

    def deactivate(self, code_id):
        row = self.rows.get(int(code_id))
        if not row or not row.is_active:
            return False
        self.rows[row.code_id] = replace(row, is_active=False)
        self._sync_staff(row.owner_id, row.owner_kind, row.center_id, is_active=False)
        return True

    def deactivate_for_owner(self, center_id, owner_id, owner_kind):
        count = 0
        for row in list(self.rows.values()):
            if row.is_active and row.center_id == center_id and row.owner_id == owner_id and row.owner_kind == owner_kind:
                self.rows[row.code_id] = replace(row, is_active=False)
                count += 1
        self._sync_staff(owner_id, owner_kind, center_id, is_active=False)
        return count

    def list_active(self, center_id):
        return sorted((r for r in self.rows.values() if r.is_active and r.center_id == center_id), key=lambda r: r.code)


class FakeStaffSettingsRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[tuple[int, int], StaffCheckInSettings] = {}

    def get(self, teacher_id, center_id):
        return self.rows.get((int(teacher_id), int(center_id)))

    def list_for_center(self, center_id):
        return [s for (_, cid), s in sorted(self.rows.items()) if cid == center_id]

    def upsert(self, *, teacher_id, center_id, check_in_code, recipients, message_template, is_active):
        existing = self.rows.get((teacher_id, center_id))
        settings = StaffCheckInSettings(
            settings_id=existing.settings_id if existing else self._next_id,
            teacher_id=teacher_id,
            center_id=center_id,
            check_in_code=check_in_code,
            recipients=tuple(recipients),
            message_template=message_template,
            is_active=is_active,
        )
        if not existing:
            self._next_id += 1
        self.rows[(teacher_id, center_id)] = settings
        return settings


class FakeWorkRecordsRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, TeacherWorkRecord] = {}

    def add(self, **fields) -> TeacherWorkRecord:
        record = TeacherWorkRecord(record_id=self._next_id, **fields)
        self.rows[record.record_id] = record
        self._next_id += 1
        return record

    def get_for_day(self, teacher_id, center_id, work_date):
        return next(
            (
                r
                for r in self.rows.values()
                if r.teacher_id == teacher_id and r.center_id == center_id and r.work_date == work_date
            ),
            None,
        )

    def create_check_in(self, *, teacher_id, center_id, work_date, at):
        if self.get_for_day(teacher_id, center_id, work_date):
            raise DuplicateRecordError("Duplicate entry for uq_work_day")
        return self.add(
            teacher_id=teacher_id,
            center_id=center_id,
            work_date=work_date,
            check_in_at=at,
            check_out_at=None,
        )

    def set_check_out(self, record_id, *, at, work_minutes):
        row = self.rows.get(record_id)
        if not row:
            return False
        self.rows[record_id] = replace(row, check_out_at=at, work_minutes=work_minutes, no_check_out=False)
        return True

    def list_for_range(self, center_id, start, end):
        return sorted(
            (r for r in self.rows.values() if r.center_id == center_id and start <= r.work_date <= end),
            key=lambda r: (r.work_date, r.teacher_id),
        )

    def mark_missing_checkouts(self, work_date):
        count = 0
        for row in list(self.rows.values()):
            if row.work_date == work_date and row.check_in_at and row.check_out_at is None and not row.no_check_out:
                self.rows[row.record_id] = replace(row, no_check_out=True)
                count += 1
        return count

    def delete_before(self, cutoff):
        doomed = [rid for rid, r in self.rows.items() if r.work_date < cutoff]
        for rid in doomed:
            del self.rows[rid]
        return len(doomed)


class FakeClassesRepo:
    def __init__(self, *classes: ClassInfo):
        self.classes = {c.class_id: c for c in classes}
        self.enrollments: set[tuple[int, int]] = set()

    def enroll(self, student_id, class_id):
        self.enrollments.add((student_id, class_id))

    def get_by_id(self, class_id):
        return self.classes.get(int(class_id))

    def list_active_for_student(self, student_id, center_id):
        return [
            c
            for cid, c in sorted(self.classes.items())
            if (student_id, cid) in self.enrollments and c.center_id == center_id and not c.is_archived
        ]


class FakeAttendanceRepo:
    """Mirrors UNIQUE(student_id, check_in_date, COALESCE(class_id, 0))."""

    def __init__(self, users: FakeUsersRepo | None = None):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}
        self.flags: list[tuple[int, NotificationEvent]] = []
        self._users = users

    @staticmethod
    def _key(student_id, check_in_date, class_id):
        return (student_id, check_in_date, class_id or 0)

    def add(self, **fields) -> AttendanceRecord:
        fields.setdefault("was_late", False)
        fields.setdefault("status", AttendanceStatus.PRESENT)
        fields.setdefault("class_id", None)
        record = AttendanceRecord(attendance_id=self._next_id, **fields)
        self.rows[record.attendance_id] = record
        self._next_id += 1
        return record

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def get_for_scope(self, student_id, check_in_date, class_id):
        key = self._key(student_id, check_in_date, class_id)
        return next(
            (r for r in self.rows.values() if self._key(r.student_id, r.check_in_date, r.class_id) == key),
            None,
        )

    def create(self, *, student_id, center_id, class_id, check_in_date, check_in_at, check_out_at, was_late, status):
        if self.get_for_scope(student_id, check_in_date, class_id):
            raise DuplicateRecordError("Duplicate entry for uq_attendance_scope")
        return self.add(
            student_id=student_id,
            center_id=center_id,
            class_id=class_id,
            check_in_date=check_in_date,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
            was_late=was_late,
            status=status,
        )

    def set_check_in(self, attendance_id, *, check_in_at, was_late, status):
        row = self.rows[attendance_id]
        if row.check_in_at is not None or row.check_out_at is not None:
            return False
        self.rows[attendance_id] = replace(row, check_in_at=check_in_at, was_late=was_late, status=status)
        return True

    def set_check_out(self, attendance_id, *, check_out_at):
        row = self.rows[attendance_id]
        if row.check_out_at is not None:
            return False
        self.rows[attendance_id] = replace(
            row, check_out_at=check_out_at, check_in_at=row.check_in_at or check_out_at
        )
        return True

    def update_status(self, attendance_id, *, status, was_late):
        row = self.rows[attendance_id]
        self.rows[attendance_id] = replace(row, status=status, was_late=was_late)
        return True

    def mark_notification_sent(self, attendance_id, event, *, at):
        row = self.rows[attendance_id]
        field = {
            NotificationEvent.CHECK_IN: "check_in_notification_sent",
            NotificationEvent.LATE: "late_notification_sent",
            NotificationEvent.CHECK_OUT: "check_out_notification_sent",
        }[event]
        self.rows[attendance_id] = replace(row, **{field: True})
        self.flags.append((attendance_id, event))

    def list_for_date(self, center_id, check_in_date):
        out = []
        for r in self.rows.values():
            if r.center_id == center_id and r.check_in_date == check_in_date:
                user = self._users.get_by_id(r.student_id) if self._users else None
                out.append(AttendanceWithStudent(record=r, student_name=user.full_name if user else ""))
        return out

    def list_for_student(self, student_id, start, end):
        rows = [r for r in self.rows.values() if r.student_id == student_id and start <= r.check_in_date <= end]
        rows.sort(key=lambda r: (r.check_in_date, r.attendance_id), reverse=True)
        return [AttendanceWithClass(record=r) for r in rows]

    def delete_before(self, cutoff):
        doomed = [rid for rid, r in self.rows.items() if r.check_in_date < cutoff]
        for rid in doomed:
            del self.rows[rid]
        return len(doomed)


class FakeLogsRepo:
    def __init__(self):
        self.entries: list[NotificationLogEntry] = []
        self.fail = False

    def append(self, *, attendance_record_id, center_id, recipient_phone, recipient_role, message_type, status,
               error_message, sent_at):
        if self.fail:
            raise RuntimeError("log store down")
        entry = NotificationLogEntry(
            log_id=len(self.entries) + 1,
            attendance_record_id=attendance_record_id,
            center_id=center_id,
            recipient_phone=recipient_phone,
            recipient_role=recipient_role,
            message_type=message_type,
            status=status,
            sent_at=sent_at,
            error_message=error_message,
        )
        self.entries.append(entry)
        return entry.log_id

    def list_for_record(self, attendance_record_id):
        return [e for e in reversed(self.entries) if e.attendance_record_id == attendance_record_id]


class FakeTemplatesRepo:
    def __init__(self, bodies: dict[tuple[int, str], str] | None = None):
        self.bodies = dict(bodies or {})

    def get_active_body(self, center_id, template_type):
        return self.bodies.get((center_id, template_type))


class FakeCredentialResolver:
    def __init__(self, credentials=None):
        self.credentials = credentials

    def get(self, center_id):
        return self.credentials


class FakeGateway:
    def __init__(self, result: SendResult | None = None):
        self.result = result or SendResult(True)
        self.sent: list[dict] = []

    def send(self, credentials, *, to, text):
        self.sent.append({"to": to, "text": text, "credentials": credentials})
        return self.result


class FakeMaintenanceRepo:
    def __init__(self, grades: dict[int, str] | None = None, settings: dict[str, str] | None = None):
        self.grades = dict(grades or {})
        self.settings = dict(settings or {})
        self.promotions = 0

    def get_setting(self, key):
        return self.settings.get(key)

    def list_student_grades(self):
        return sorted(self.grades.items())

    def apply_grade_promotion(self, year, changes, *, watermark_key):
        done = self.settings.get(watermark_key)
        if done is not None and int(done) >= year:
            return False
        self.grades.update(changes)
        self.settings[watermark_key] = str(year)
        self.promotions += 1
        return True
