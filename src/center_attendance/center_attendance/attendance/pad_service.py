from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..classes.model import ClassInfo
from ..classes.repository import ClassRepository
from ..codes.model import Resolution
from ..codes.resolver import IdentityResolver
from ..common.datetime_utils import now_local
from ..common.validators import optional_id
from ..core import constants
from ..core.enums import OwnerKind, ResolutionSource
from ..core.exceptions import NotFoundError
from ..notifications.dispatcher import NotificationDispatcher
from ..staff.repository import StaffSettingsRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PadValidation:
    resolution: Resolution
    user: User
    classes: list[ClassInfo] = field(default_factory=list)
    at: Optional[datetime] = None


@dataclass(frozen=True)
class PadResult:
    record: AttendanceRecord
    student: User
    class_name: str = ""


class AttendancePadService:
    """Front-desk keypad: code in, attendance and notifications out."""

    def __init__(
        self,
        resolver: IdentityResolver,
        ledger: AttendanceService,
        users: UserRepository,
        classes: ClassRepository,
        staff_settings: StaffSettingsRepository,
        dispatcher: NotificationDispatcher | None = None,
        *,
        tz_name: str = constants.DEFAULT_CENTER_TIMEZONE,
    ):
        self._resolver = resolver
        self._ledger = ledger
        self._users = users
        self._classes = classes
        self._staff_settings = staff_settings
        self._dispatcher = dispatcher
        self._tz_name = tz_name

    def validate_code(self, center_id: int, code: str, *, now: datetime | None = None) -> PadValidation:
        """Identify who typed the code.

        Students get their active classes back for the class picker. Staff are
        announced to the configured recipients right away.
        """
        resolution = self._resolver.resolve(center_id, code)
        user = self._users.get_by_id(resolution.owner_id)
        if not user:
            raise NotFoundError(constants.MSG_CODE_NOT_FOUND)

        if resolution.kind == OwnerKind.STUDENT:
            classes = list(self._classes.list_active_for_student(user.user_id, int(center_id)))
            return PadValidation(resolution=resolution, user=user, classes=classes)

        at = now or now_local(self._tz_name)
        settings = None
        if resolution.via == ResolutionSource.STAFF_CODE:
            settings = self._staff_settings.get(user.user_id, int(center_id))
        logger.info("Staff %s checked in at center %s via %s", user.user_id, center_id, resolution.via.value)
        if self._dispatcher is not None:
            try:
                self._dispatcher.dispatch_staff_check_in(user, int(center_id), settings, at)
            except Exception:
                logger.exception("Could not schedule staff check-in notification for %s", user.user_id)
        return PadValidation(resolution=resolution, user=user, at=at)

    def _resolve_student(self, center_id: int, code: str) -> User:
        resolution = self._resolver.resolve(center_id, code)
        if resolution.kind != OwnerKind.STUDENT:
            raise NotFoundError(constants.MSG_CODE_NOT_FOUND)
        student = self._users.get_by_id(resolution.owner_id)
        if not student:
            raise NotFoundError(constants.MSG_CODE_NOT_FOUND)
        return student

    def check_in(
        self,
        center_id: int,
        code: str,
        class_id: Optional[int] = None,
        *,
        is_late: bool = False,
        now: datetime | None = None,
    ) -> PadResult:
        student = self._resolve_student(center_id, code)
        class_id = optional_id(class_id, "classId")
        record = self._ledger.check_in(center_id, student.user_id, class_id, is_late=is_late, now=now)

        class_name = ""
        if class_id:
            info = self._classes.get_by_id(class_id)
            if info:
                class_name = info.display_name
        return PadResult(record=record, student=student, class_name=class_name)

    def check_out(
        self,
        center_id: int,
        code: str,
        class_id: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> PadResult:
        student = self._resolve_student(center_id, code)
        record = self._ledger.check_out(center_id, student.user_id, class_id, now=now)
        return PadResult(record=record, student=student)
