from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..codes.model import AttendanceCode
from ..codes.registry import CodeRegistry, derive_candidates
from ..common.validators import require_code, require_id, require_min_length, require_non_empty
from ..core.enums import STAFF_ROLES, OwnerKind, Role
from ..core.exceptions import AuthenticationError, CollisionError, NotFoundError, ValidationError
from .center_repository import CenterRepository
from .repository import UserRepository

if TYPE_CHECKING:
    from ..staff.service import StaffService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role


@dataclass(frozen=True)
class OnboardResult:
    user_id: int
    code: Optional[str] = None
    code_error: Optional[str] = None


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)


class UserService:
    """Use case: enrol students and staff into a center, with their attendance code."""

    def __init__(
        self,
        users: UserRepository,
        centers: CenterRepository,
        registry: CodeRegistry,
        staff_service: "StaffService | None" = None,
    ):
        self._users = users
        self._centers = centers
        self._registry = registry
        self._staff_service = staff_service

    def _create_account(
        self,
        *,
        center_id: int,
        full_name: str,
        username: str,
        password: str,
        role: Role,
        phone: Optional[str] = None,
        mother_phone: Optional[str] = None,
        father_phone: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> int:
        center_id = require_id(center_id, "centerId")
        full_name = require_non_empty(full_name, "Name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", 6)

        if not self._centers.get_by_id(center_id):
            raise NotFoundError("Center not found")
        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            phone=(phone or "").strip() or None,
            mother_phone=(mother_phone or "").strip() or None,
            father_phone=(father_phone or "").strip() or None,
            grade=(grade or "").strip() or None,
        )
        self._users.link_center(user_id=user_id, center_id=center_id)
        logger.info("Created %s account %s in center %s", role.value, user_id, center_id)
        return user_id

    def onboard_student(
        self,
        *,
        center_id: int,
        full_name: str,
        username: str,
        password: str,
        phone: Optional[str] = None,
        mother_phone: Optional[str] = None,
        father_phone: Optional[str] = None,
        grade: Optional[str] = None,
        attendance_code: Optional[str] = None,
    ) -> OnboardResult:
        """Create the student and give them a pad code.

        A clashing or underivable code does not undo the account; the result
        carries the reason so staff can set a code manually.
        """
        if attendance_code:
            attendance_code = require_code(attendance_code)

        user_id = self._create_account(
            center_id=center_id,
            full_name=full_name,
            username=username,
            password=password,
            role=Role.STUDENT,
            phone=phone,
            mother_phone=mother_phone,
            father_phone=father_phone,
            grade=grade,
        )

        if not attendance_code and not derive_candidates(phone):
            return OnboardResult(user_id=user_id, code_error="No phone number to derive an attendance code from")

        try:
            code: AttendanceCode = self._registry.register_code(
                int(center_id), user_id, OwnerKind.STUDENT, proposed_code=attendance_code, phone=phone
            )
        except CollisionError as e:
            logger.info("Student %s created without a code: %s", user_id, e)
            return OnboardResult(user_id=user_id, code_error=str(e))
        return OnboardResult(user_id=user_id, code=code.code)

    def onboard_staff(
        self,
        *,
        center_id: int,
        full_name: str,
        username: str,
        password: str,
        role: Role = Role.TEACHER,
        phone: Optional[str] = None,
        check_in_code: Optional[str] = None,
    ) -> OnboardResult:
        role = Role(role)
        if role not in STAFF_ROLES:
            raise ValidationError("Staff role must be teacher or principal")
        if check_in_code:
            check_in_code = require_code(check_in_code)

        user_id = self._create_account(
            center_id=center_id,
            full_name=full_name,
            username=username,
            password=password,
            role=role,
            phone=phone,
        )

        if not check_in_code or self._staff_service is None:
            return OnboardResult(user_id=user_id)
        try:
            self._staff_service.save_settings(user_id, int(center_id), check_in_code)
        except CollisionError as e:
            return OnboardResult(user_id=user_id, code_error=str(e))
        return OnboardResult(user_id=user_id, code=check_in_code)
