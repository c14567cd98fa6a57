from __future__ import annotations

import logging

from ..common.validators import phone_digits, require_code, require_id
from ..core import constants
from ..core.enums import STAFF_ROLES, OwnerKind, ResolutionSource
from ..core.exceptions import NotFoundError
from ..users.repository import UserRepository
from .model import Resolution
from .repository import AttendanceCodeRepository

logger = logging.getLogger(__name__)


def phone_matches_code(phone: str | None, code: str) -> bool:
    """Legacy staff rule: last four digits, or digits 4-7 of a 010-XXXX-YYYY number."""
    digits = phone_digits(phone)
    if len(digits) < 4:
        return False
    if digits[-4:] == code:
        return True
    return len(digits) >= 7 and digits[3:7] == code


class IdentityResolver:
    """(center, code) -> student or staff. Students always win a shared code."""

    def __init__(self, codes: AttendanceCodeRepository, users: UserRepository):
        self._codes = codes
        self._users = users

    def resolve(self, center_id: int, code: str) -> Resolution:
        code = require_code(code)
        center_id = require_id(center_id, "centerId")

        registered = self._codes.find_active(center_id, code)
        if registered and registered.owner_kind == OwnerKind.STUDENT:
            return Resolution(OwnerKind.STUDENT, registered.owner_id, ResolutionSource.STUDENT_CODE)
        # Staff check-in codes are mirrored into staff_check_in_settings by the code repository.
        if registered and registered.owner_kind == OwnerKind.STAFF:
            return Resolution(OwnerKind.STAFF, registered.owner_id, ResolutionSource.STAFF_CODE)

        for staff in self._users.list_for_center(center_id, roles=STAFF_ROLES):
            if phone_matches_code(staff.phone, code):
                logger.info("Code matched staff %s by phone in center %s", staff.user_id, center_id)
                return Resolution(OwnerKind.STAFF, staff.user_id, ResolutionSource.LEGACY_PHONE)

        raise NotFoundError(constants.MSG_CODE_NOT_FOUND)
