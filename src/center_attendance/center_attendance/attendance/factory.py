from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the check-in strategy."""

    def for_checkin(self, *, is_late: bool = False) -> AttendanceStrategy:
        if is_late:
            return LateStrategy()
        return NormalStrategy()
