from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import phone_digits, require_code, require_id
from ..core.enums import STAFF_ROLES, OwnerKind, Role
from ..core.exceptions import CollisionError, DuplicateRecordError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import AttendanceCode, AutoGenerateResult, SkippedOwner
from .repository import AttendanceCodeRepository

logger = logging.getLogger(__name__)

SKIP_ALREADY_HAS_CODE = "already has code"
SKIP_NO_PHONE = "no phone"
SKIP_COLLISION = "collision"


def derive_candidates(phone: Optional[str]) -> list[str]:
    """Codes a phone number can yield, in preference order.

    '010-1234-5678' -> ['5678', '1234']. Fewer than 8 digits yields nothing.
    """
    digits = phone_digits(phone)
    if len(digits) < 8:
        return []
    out = [digits[-4:]]
    middle = digits[3:7]
    if middle not in out:
        out.append(middle)
    return out


class CodeRegistry:
    """Single namespace of 4-digit codes per center, shared by students and staff."""

    def __init__(self, codes: AttendanceCodeRepository, users: UserRepository):
        self._codes = codes
        self._users = users

    def _require_owner(self, owner_id: int, owner_kind: OwnerKind) -> None:
        owner = self._users.get_by_id(owner_id)
        if not owner:
            raise NotFoundError("Code owner not found")
        if owner_kind == OwnerKind.STUDENT and owner.role != Role.STUDENT:
            raise ValidationError("Student codes can only be assigned to students")
        if owner_kind == OwnerKind.STAFF and owner.role not in STAFF_ROLES:
            raise ValidationError("Staff codes can only be assigned to teachers and principals")

    def register_code(
        self,
        center_id: int,
        owner_id: int,
        owner_kind: OwnerKind,
        proposed_code: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> AttendanceCode:
        center_id = require_id(center_id, "centerId")
        owner_id = require_id(owner_id, "ownerId")
        owner_kind = OwnerKind(owner_kind)
        self._require_owner(owner_id, owner_kind)

        if proposed_code not in (None, ""):
            candidates = [require_code(proposed_code)]
        else:
            candidates = derive_candidates(phone)
            if not candidates:
                raise ValidationError("A phone number with at least 8 digits is required to derive a code")

        current = self._codes.find_active_for_owner(center_id, owner_id, owner_kind)
        for candidate in candidates:
            if current and current.code == candidate:
                return current
            try:
                created = self._codes.replace_active(
                    center_id=center_id, owner_id=owner_id, owner_kind=owner_kind, code=candidate
                )
            except DuplicateRecordError:
                logger.info("Code %s already active in center %s", candidate, center_id)
                continue
            logger.info(
                "Registered code %s for %s %s in center %s", candidate, owner_kind.value, owner_id, center_id
            )
            return created

        if len(candidates) > 1:
            raise CollisionError("Both codes derived from the phone number are in use; enter a code manually")
        raise CollisionError()

    def deactivate(self, code_id: int) -> AttendanceCode:
        code_id = require_id(code_id, "codeId")
        existing = self._codes.get_by_id(code_id)
        if not existing:
            raise NotFoundError("Attendance code not found")
        if existing.is_active:
            self._codes.deactivate(code_id)
        return self._codes.get_by_id(code_id) or existing

    def deactivate_for_owner(self, center_id: int, owner_id: int, owner_kind: OwnerKind) -> int:
        return self._codes.deactivate_for_owner(center_id, owner_id, OwnerKind(owner_kind))

    def list_codes(self, center_id: int) -> list[AttendanceCode]:
        return list(self._codes.list_active(require_id(center_id, "centerId")))

    def auto_generate_missing_codes(self, center_id: int) -> AutoGenerateResult:
        """Backfill codes for students of a center who have none yet."""
        center_id = require_id(center_id, "centerId")
        result = AutoGenerateResult()

        for student in self._users.list_for_center(center_id, roles=[Role.STUDENT]):
            if self._codes.find_active_for_owner(center_id, student.user_id, OwnerKind.STUDENT):
                result.skipped.append(SkippedOwner(student.user_id, student.full_name, SKIP_ALREADY_HAS_CODE))
                continue

            phone = student.phone
            if not derive_candidates(phone):
                result.skipped.append(SkippedOwner(student.user_id, student.full_name, SKIP_NO_PHONE))
                continue

            try:
                code = self.register_code(center_id, student.user_id, OwnerKind.STUDENT, phone=phone)
            except CollisionError:
                result.skipped.append(SkippedOwner(student.user_id, student.full_name, SKIP_COLLISION))
                continue
            result.created.append(code)

        logger.info(
            "Auto-generated %d codes in center %s (%d skipped)",
            len(result.created),
            center_id,
            len(result.skipped),
        )
        return result
