from __future__ import annotations

from ...core.enums import AttendanceStatus, NotificationEvent
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late arrival."""

    def decide_checkin(self) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, was_late=True, event=NotificationEvent.LATE)
