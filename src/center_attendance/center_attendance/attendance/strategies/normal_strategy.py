from __future__ import annotations

from ...core.enums import AttendanceStatus, NotificationEvent
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time arrival: present, guardian gets the check-in message."""

    def decide_checkin(self) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, was_late=False, event=NotificationEvent.CHECK_IN)
