from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, NotificationEvent
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceWithClass, AttendanceWithStudent
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.student_id, a.center_id, a.class_id, a.check_in_date,
    a.check_in_at, a.check_out_at, a.was_late, a.attendance_status,
    a.check_in_notification_sent, a.late_notification_sent, a.check_out_notification_sent
"""

_FLAG_COLUMNS = {
    NotificationEvent.CHECK_IN: "check_in_notification_sent=1",
    NotificationEvent.LATE: "late_notification_sent=1, late_notification_sent_at=%s",
    NotificationEvent.CHECK_OUT: "check_out_notification_sent=1",
}


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        center_id=int(r["center_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        check_in_date=r["check_in_date"],
        check_in_at=r.get("check_in_at"),
        check_out_at=r.get("check_out_at"),
        was_late=as_bool(r.get("was_late")),
        status=AttendanceStatus(r["attendance_status"]),
        check_in_notification_sent=as_bool(r.get("check_in_notification_sent")),
        late_notification_sent=as_bool(r.get("late_notification_sent")),
        check_out_notification_sent=as_bool(r.get("check_out_notification_sent")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_scope(self, student_id: int, check_in_date: date, class_id: Optional[int]) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.student_id=%s AND a.check_in_date=%s AND a.scope_key=%s
                """,
                (student_id, check_in_date, int(class_id or 0)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        student_id: int,
        center_id: int,
        class_id: Optional[int],
        check_in_date: date,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
        was_late: bool,
        status: AttendanceStatus,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, center_id, class_id, check_in_date,
                    check_in_at, check_out_at, was_late, attendance_status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    student_id,
                    center_id,
                    class_id,
                    check_in_date,
                    check_in_at,
                    check_out_at,
                    1 if was_late else 0,
                    AttendanceStatus(status).value,
                ),
            )
            attendance_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (attendance_id,))
            return _to_record(fetchone(cur))

    def set_check_in(self, attendance_id: int, *, check_in_at: datetime, was_late: bool, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_at=%s, was_late=%s, attendance_status=%s
                WHERE attendance_id=%s AND check_in_at IS NULL AND check_out_at IS NULL
                """,
                (check_in_at, 1 if was_late else 0, AttendanceStatus(status).value, attendance_id),
            )
            return cur.rowcount > 0

    def set_check_out(self, attendance_id: int, *, check_out_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_at=%s, check_in_at=COALESCE(check_in_at, %s)
                WHERE attendance_id=%s AND check_out_at IS NULL
                """,
                (check_out_at, check_out_at, attendance_id),
            )
            return cur.rowcount > 0

    def update_status(self, attendance_id: int, *, status: AttendanceStatus, was_late: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET attendance_status=%s, was_late=%s WHERE attendance_id=%s",
                (AttendanceStatus(status).value, 1 if was_late else 0, attendance_id),
            )
            return cur.rowcount > 0

    def mark_notification_sent(self, attendance_id: int, event: NotificationEvent, *, at: datetime) -> None:
        assignment = _FLAG_COLUMNS.get(NotificationEvent(event))
        if not assignment:
            return
        params = (at, attendance_id) if "%s" in assignment else (attendance_id,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_records SET {assignment} WHERE attendance_id=%s", params)

    def list_for_date(self, center_id: int, check_in_date: date) -> Sequence[AttendanceWithStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.full_name, u.grade, c.name AS class_name
                FROM attendance_records a
                JOIN users u ON u.user_id = a.student_id
                LEFT JOIN classes c ON c.class_id = a.class_id
                WHERE a.center_id=%s AND a.check_in_date=%s
                ORDER BY u.full_name, a.class_id
                """,
                (center_id, check_in_date),
            )
            return [
                AttendanceWithStudent(
                    record=_to_record(r),
                    student_name=r["full_name"],
                    grade=r.get("grade"),
                    class_name=r.get("class_name"),
                )
                for r in fetchall(cur)
            ]

    def list_for_student(self, student_id: int, start: date, end: date) -> Sequence[AttendanceWithClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, c.name AS class_name
                FROM attendance_records a
                LEFT JOIN classes c ON c.class_id = a.class_id
                WHERE a.student_id=%s AND a.check_in_date BETWEEN %s AND %s
                ORDER BY a.check_in_date DESC, a.attendance_id DESC
                """,
                (student_id, start, end),
            )
            return [AttendanceWithClass(record=_to_record(r), class_name=r.get("class_name")) for r in fetchall(cur)]

    def delete_before(self, cutoff: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE check_in_date < %s", (cutoff,))
            return int(cur.rowcount)
