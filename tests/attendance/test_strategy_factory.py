from src.center_attendance.center_attendance.attendance.factory import AttendanceStrategyFactory
from src.center_attendance.center_attendance.attendance.strategies.late_strategy import LateStrategy
from src.center_attendance.center_attendance.attendance.strategies.normal_strategy import NormalStrategy
from src.center_attendance.center_attendance.core.enums import AttendanceStatus, NotificationEvent


def test_factory_checkin_on_time():
    strategy = AttendanceStrategyFactory().for_checkin()

    assert isinstance(strategy, NormalStrategy)
    decision = strategy.decide_checkin()
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.was_late is False
    assert decision.event == NotificationEvent.CHECK_IN


def test_factory_checkin_late_flag():
    strategy = AttendanceStrategyFactory().for_checkin(is_late=True)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin()
    assert decision.status == AttendanceStatus.LATE
    assert decision.was_late is True
    assert decision.event == NotificationEvent.LATE
