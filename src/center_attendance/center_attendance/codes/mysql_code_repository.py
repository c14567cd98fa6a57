from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import OwnerKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import AttendanceCode
from .repository import AttendanceCodeRepository

_SELECT = """
    SELECT code_id, center_id, owner_id, owner_kind, code, is_active, created_at
    FROM attendance_codes
"""


def _to_code(row: dict) -> AttendanceCode:
    return AttendanceCode(
        code_id=int(row["code_id"]),
        center_id=int(row["center_id"]),
        owner_id=int(row["owner_id"]),
        owner_kind=OwnerKind(row["owner_kind"]),
        code=str(row["code"]),
        is_active=as_bool(row.get("is_active")),
        created_at=row.get("created_at"),
    )


_SYNC_STAFF_CODE = """
    UPDATE staff_check_in_settings SET check_in_code=%s, is_active=1
    WHERE teacher_id=%s AND center_id=%s
"""

_DEACTIVATE_STAFF_SETTINGS = """
    UPDATE staff_check_in_settings SET is_active=0
    WHERE teacher_id=%s AND center_id=%s
"""


class MySQLAttendanceCodeRepository(AttendanceCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, code_id: int) -> Optional[AttendanceCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE code_id=%s", (code_id,))
            row = fetchone(cur)
            return _to_code(row) if row else None

    def find_active(self, center_id: int, code: str) -> Optional[AttendanceCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE center_id=%s AND code=%s AND is_active=1", (center_id, code))
            row = fetchone(cur)
            return _to_code(row) if row else None

    def find_active_for_owner(self, center_id: int, owner_id: int, owner_kind: OwnerKind) -> Optional[AttendanceCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE center_id=%s AND owner_id=%s AND owner_kind=%s AND is_active=1",
                (center_id, owner_id, OwnerKind(owner_kind).value),
            )
            row = fetchone(cur)
            return _to_code(row) if row else None

    def replace_active(self, *, center_id: int, owner_id: int, owner_kind: OwnerKind, code: str) -> AttendanceCode:
        kind = OwnerKind(owner_kind).value
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_codes SET is_active=0
                WHERE center_id=%s AND owner_id=%s AND owner_kind=%s AND is_active=1
                """,
                (center_id, owner_id, kind),
            )
            # The unique index on (center_id, code, active_marker) is the collision check.
            cur.execute(
                """
                INSERT INTO attendance_codes(center_id, owner_id, owner_kind, code, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (center_id, owner_id, kind, code),
            )
            code_id = int(cur.lastrowid)
            if kind == OwnerKind.STAFF.value:
                cur.execute(_SYNC_STAFF_CODE, (code, owner_id, center_id))
            cur.execute(_SELECT + " WHERE code_id=%s", (code_id,))
            return _to_code(fetchone(cur))

    def deactivate(self, code_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE code_id=%s AND is_active=1 FOR UPDATE", (code_id,))
            row = fetchone(cur)
            if not row:
                return False
            cur.execute("UPDATE attendance_codes SET is_active=0 WHERE code_id=%s", (code_id,))
            if row["owner_kind"] == OwnerKind.STAFF.value:
                cur.execute(_DEACTIVATE_STAFF_SETTINGS, (row["owner_id"], row["center_id"]))
            return True

    def deactivate_for_owner(self, center_id: int, owner_id: int, owner_kind: OwnerKind) -> int:
        kind = OwnerKind(owner_kind).value
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_codes SET is_active=0
                WHERE center_id=%s AND owner_id=%s AND owner_kind=%s AND is_active=1
                """,
                (center_id, owner_id, kind),
            )
            count = int(cur.rowcount)
            if kind == OwnerKind.STAFF.value:
                cur.execute(_DEACTIVATE_STAFF_SETTINGS, (owner_id, center_id))
            return count

    def list_active(self, center_id: int) -> Sequence[AttendanceCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE center_id=%s AND is_active=1 ORDER BY code", (center_id,))
            return [_to_code(r) for r in fetchall(cur)]
