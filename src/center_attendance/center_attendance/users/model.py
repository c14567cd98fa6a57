from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, STAFF_ROLES


@dataclass(frozen=True)
class User:
    """Domain entity: a student, teacher, principal or admin account.

    Note: Plain data object, no database access here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    phone: Optional[str] = None
    mother_phone: Optional[str] = None
    father_phone: Optional[str] = None
    grade: Optional[str] = None
    is_active: bool = True

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
