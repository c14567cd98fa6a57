from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .center_model import Center
from .center_repository import CenterRepository


class MySQLCenterRepository(CenterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, center_id: int) -> Optional[Center]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT center_id, name FROM centers WHERE center_id=%s", (center_id,))
            row = fetchone(cur)
            if not row:
                return None
            return Center(center_id=int(row["center_id"]), name=row["name"])

    def list_all(self) -> Sequence[Center]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT center_id, name FROM centers ORDER BY name")
            rows = fetchall(cur)
            return [Center(center_id=int(r["center_id"]), name=r["name"]) for r in rows]
