from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import MaintenanceRepository


def _as_year(value: Optional[str]) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class MySQLMaintenanceRepository(MaintenanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_setting(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_value FROM system_settings WHERE setting_key=%s", (key,))
            row = fetchone(cur)
            return row["setting_value"] if row else None

    def list_student_grades(self) -> Sequence[Tuple[int, str]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, grade FROM users
                WHERE role='student' AND is_active=1 AND grade IS NOT NULL AND grade <> ''
                ORDER BY user_id
                """
            )
            return [(int(r["user_id"]), r["grade"]) for r in fetchall(cur)]

    def apply_grade_promotion(self, year: int, changes: Mapping[int, str], *, watermark_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the watermark serializes concurrent promoters.
            cur.execute(
                "SELECT setting_value FROM system_settings WHERE setting_key=%s FOR UPDATE",
                (watermark_key,),
            )
            row = fetchone(cur)
            done = _as_year(row["setting_value"]) if row else None
            if done is not None and done >= int(year):
                return False

            for user_id, grade in changes.items():
                cur.execute("UPDATE users SET grade=%s WHERE user_id=%s", (grade, user_id))

            cur.execute(
                """
                INSERT INTO system_settings(setting_key, setting_value) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (watermark_key, str(int(year))),
            )
            return True
