from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization and identity resolution."""

    STUDENT = "student"
    TEACHER = "teacher"
    PRINCIPAL = "principal"
    ADMIN = "admin"


STAFF_ROLES = (Role.TEACHER, Role.PRINCIPAL)


class OwnerKind(str, Enum):
    """Who an attendance code belongs to."""

    STUDENT = "STUDENT"
    STAFF = "STAFF"


class ResolutionSource(str, Enum):
    STUDENT_CODE = "student_code"
    STAFF_CODE = "staff_code"
    LEGACY_PHONE = "legacy_phone"


class AttendanceStatus(str, Enum):
    """Roll-call status stored with an attendance record."""

    PENDING = "pending"
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class NotificationEvent(str, Enum):
    """State transitions that trigger a notification."""

    CHECK_IN = "check_in"
    LATE = "late"
    CHECK_OUT = "check_out"
    STAFF_CHECK_IN = "staff_check_in"


class MessageType(str, Enum):
    ATTENDANCE_CHECKIN = "attendance_checkin"
    LATE = "late"
    CHECK_OUT = "check_out"
    STAFF_CHECKIN = "staff_checkin"


class RecipientRole(str, Enum):
    MOTHER = "mother"
    FATHER = "father"
    ADMIN = "admin"
    TEACHER = "teacher"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
