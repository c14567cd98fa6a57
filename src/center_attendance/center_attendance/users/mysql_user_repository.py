from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    u.user_id, u.full_name, u.username, u.password_hash, u.role,
    u.phone, u.mother_phone, u.father_phone, u.grade, u.is_active
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        phone=row.get("phone"),
        mother_phone=row.get("mother_phone"),
        father_phone=row.get("father_phone"),
        grade=row.get("grade"),
        is_active=as_bool(row.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users u WHERE u.user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users u WHERE u.username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        role: Role,
        phone: Optional[str] = None,
        mother_phone: Optional[str] = None,
        father_phone: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, username, password_hash, role,
                                  phone, mother_phone, father_phone, grade, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (full_name, username, password_hash, role.value, phone, mother_phone, father_phone, grade),
            )
            return int(cur.lastrowid)

    def link_center(self, *, user_id: int, center_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO user_centers(user_id, center_id) VALUES(%s,%s)",
                (user_id, center_id),
            )

    def list_for_center(self, center_id: int, *, roles: Iterable[Role]) -> Sequence[User]:
        role_values = [Role(r).value for r in roles]
        if not role_values:
            return []
        placeholders = ",".join(["%s"] * len(role_values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                JOIN user_centers uc ON uc.user_id = u.user_id
                WHERE uc.center_id=%s AND u.is_active=1 AND u.role IN ({placeholders})
                ORDER BY u.user_id
                """,
                (center_id, *role_values),
            )
            return [_to_user(r) for r in fetchall(cur)]
