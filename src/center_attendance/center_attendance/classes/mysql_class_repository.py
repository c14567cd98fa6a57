from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import ClassInfo
from .repository import ClassRepository


def _to_class(row: dict) -> ClassInfo:
    return ClassInfo(
        class_id=int(row["class_id"]),
        center_id=int(row["center_id"]),
        name=row["name"],
        classroom=row.get("classroom"),
        is_archived=as_bool(row.get("is_archived")),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, center_id, name, classroom, is_archived FROM classes WHERE class_id=%s",
                (class_id,),
            )
            row = fetchone(cur)
            return _to_class(row) if row else None

    def list_active_for_student(self, student_id: int, center_id: int) -> Sequence[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.center_id, c.name, c.classroom, c.is_archived
                FROM classes c
                JOIN enrollments e ON e.class_id = c.class_id
                WHERE e.student_id=%s AND c.center_id=%s AND c.is_archived=0
                ORDER BY c.name
                """,
                (student_id, center_id),
            )
            return [_to_class(r) for r in fetchall(cur)]
