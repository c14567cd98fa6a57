from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import StaffCheckInSettings, TeacherWorkRecord
from .repository import StaffSettingsRepository, WorkRecordRepository

_SETTINGS_SELECT = """
    SELECT settings_id, teacher_id, center_id, check_in_code,
           sms_recipient_1, sms_recipient_2, message_template, is_active
    FROM staff_check_in_settings
"""

_WORK_SELECT = """
    SELECT record_id, teacher_id, center_id, work_date, check_in_at, check_out_at,
           work_minutes, no_check_out
    FROM teacher_work_records
"""


def _to_settings(row: dict) -> StaffCheckInSettings:
    recipients = tuple(p for p in (row.get("sms_recipient_1"), row.get("sms_recipient_2")) if p)
    return StaffCheckInSettings(
        settings_id=int(row["settings_id"]),
        teacher_id=int(row["teacher_id"]),
        center_id=int(row["center_id"]),
        check_in_code=str(row["check_in_code"]),
        recipients=recipients,
        message_template=row.get("message_template"),
        is_active=as_bool(row.get("is_active")),
    )


def _to_work_record(row: dict) -> TeacherWorkRecord:
    return TeacherWorkRecord(
        record_id=int(row["record_id"]),
        teacher_id=int(row["teacher_id"]),
        center_id=int(row["center_id"]),
        work_date=row["work_date"],
        check_in_at=row.get("check_in_at"),
        check_out_at=row.get("check_out_at"),
        work_minutes=row.get("work_minutes"),
        no_check_out=as_bool(row.get("no_check_out")),
    )


class MySQLStaffSettingsRepository(StaffSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, teacher_id: int, center_id: int) -> Optional[StaffCheckInSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SETTINGS_SELECT + " WHERE teacher_id=%s AND center_id=%s", (teacher_id, center_id))
            row = fetchone(cur)
            return _to_settings(row) if row else None

    def list_for_center(self, center_id: int) -> Sequence[StaffCheckInSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SETTINGS_SELECT + " WHERE center_id=%s ORDER BY teacher_id", (center_id,))
            return [_to_settings(r) for r in fetchall(cur)]

    def upsert(
        self,
        *,
        teacher_id: int,
        center_id: int,
        check_in_code: str,
        recipients: Sequence[str],
        message_template: Optional[str],
        is_active: bool,
    ) -> StaffCheckInSettings:
        first = recipients[0] if len(recipients) > 0 else None
        second = recipients[1] if len(recipients) > 1 else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_check_in_settings(teacher_id, center_id, check_in_code,
                    sms_recipient_1, sms_recipient_2, message_template, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_code=VALUES(check_in_code),
                    sms_recipient_1=VALUES(sms_recipient_1),
                    sms_recipient_2=VALUES(sms_recipient_2),
                    message_template=VALUES(message_template),
                    is_active=VALUES(is_active)
                """,
                (teacher_id, center_id, check_in_code, first, second, message_template, 1 if is_active else 0),
            )
            cur.execute(_SETTINGS_SELECT + " WHERE teacher_id=%s AND center_id=%s", (teacher_id, center_id))
            return _to_settings(fetchone(cur))


class MySQLWorkRecordRepository(WorkRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, teacher_id: int, center_id: int, work_date: date) -> Optional[TeacherWorkRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _WORK_SELECT + " WHERE teacher_id=%s AND center_id=%s AND work_date=%s",
                (teacher_id, center_id, work_date),
            )
            row = fetchone(cur)
            return _to_work_record(row) if row else None

    def create_check_in(self, *, teacher_id: int, center_id: int, work_date: date, at: datetime) -> TeacherWorkRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_work_records(teacher_id, center_id, work_date, check_in_at, no_check_out)
                VALUES(%s,%s,%s,%s,0)
                """,
                (teacher_id, center_id, work_date, at),
            )
            record_id = int(cur.lastrowid)
            cur.execute(_WORK_SELECT + " WHERE record_id=%s", (record_id,))
            return _to_work_record(fetchone(cur))

    def set_check_out(self, record_id: int, *, at: datetime, work_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_work_records
                SET check_out_at=%s, work_minutes=%s, no_check_out=0
                WHERE record_id=%s
                """,
                (at, int(work_minutes), record_id),
            )
            return cur.rowcount > 0

    def list_for_range(self, center_id: int, start: date, end: date) -> Sequence[TeacherWorkRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _WORK_SELECT + " WHERE center_id=%s AND work_date BETWEEN %s AND %s ORDER BY work_date, teacher_id",
                (center_id, start, end),
            )
            return [_to_work_record(r) for r in fetchall(cur)]

    def mark_missing_checkouts(self, work_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_work_records SET no_check_out=1
                WHERE work_date=%s AND check_in_at IS NOT NULL
                  AND check_out_at IS NULL AND no_check_out=0
                """,
                (work_date,),
            )
            return int(cur.rowcount)

    def delete_before(self, cutoff: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teacher_work_records WHERE work_date < %s", (cutoff,))
            return int(cur.rowcount)
