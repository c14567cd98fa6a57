from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus, NotificationEvent


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    was_late: bool
    event: NotificationEvent


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in is classified and announced."""

    @abstractmethod
    def decide_checkin(self) -> StatusDecision:
        raise NotImplementedError
