from __future__ import annotations

import re

from ..core import constants
from ..core.exceptions import ValidationError

_CODE_RE = re.compile(rf"^[0-9]{{{constants.CODE_LENGTH}}}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_id(value, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required")
    if parsed <= 0:
        raise ValidationError(f"{field_name} is required")
    return parsed


def optional_id(value, field_name: str) -> int | None:
    if value in (None, "", 0, "0"):
        return None
    return require_id(value, field_name)


def require_code(value) -> str:
    """A code is exactly four ASCII digits; '０１２３' style digits are rejected."""
    code = str(value or "").strip()
    if not _CODE_RE.match(code):
        raise ValidationError(constants.MSG_INVALID_CODE)
    return code


def phone_digits(phone: str | None) -> str:
    return re.sub(r"[^0-9]", "", phone or "")
