from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_CENTER_LABEL
from ..core.enums import NotificationEvent

DEFAULT_TEMPLATES = {
    NotificationEvent.CHECK_IN: "[프라임수학] {학생명} 학생이 {시간}에 출석하였습니다.",
    NotificationEvent.LATE: "[프라임수학] {학생명} 학생이 수업에 참여하지 않았습니다. 빠르게 등원할 수 있도록 해주세요.",
    NotificationEvent.CHECK_OUT: "[프라임수학] {{studentName}}(이)가 {{time}}에 하원하였습니다.",
    NotificationEvent.STAFF_CHECK_IN: "[{센터명}] {선생님명} 선생님 출근 확인 ({시간})",
}

# message_templates.type per event
TEMPLATE_TYPES = {
    NotificationEvent.CHECK_IN: "check_in",
    NotificationEvent.LATE: "late",
    NotificationEvent.CHECK_OUT: "check_out",
}


def korean_time(at: datetime) -> str:
    """'오후 03:05'"""
    meridiem = "오전" if at.hour < 12 else "오후"
    return f"{meridiem} {at.strftime('%I:%M')}"


def korean_date(at: datetime) -> str:
    return f"{at.year}년 {at.month}월 {at.day}일"


def staff_time(at: datetime) -> str:
    return f"{at.hour:02d}시 {at.minute:02d}분"


def staff_date(at: datetime) -> str:
    return f"{at.month}월 {at.day}일"


# placeholder -> value slot
PLACEHOLDERS = {
    "{{studentName}}": "name",
    "{{time}}": "time",
    "{{date}}": "date",
    "{name}": "name",
    "{학생명}": "name",
    "{선생님명}": "name",
    "{time}": "time",
    "{시간}": "time",
    "{date}": "date",
    "{날짜}": "date",
    "{center}": "center",
    "{센터명}": "center",
}

# Longest first so '{{time}}' wins over '{time}'.
_PLACEHOLDER_RE = re.compile("|".join(re.escape(p) for p in sorted(PLACEHOLDERS, key=len, reverse=True)))


def render(template: str, *, name: str, time_text: str, date_text: str, center_name: Optional[str]) -> str:
    """Substitutes placeholders in one pass; inserted values are never rescanned."""
    values = {
        "name": name,
        "time": time_text,
        "date": date_text,
        "center": center_name or DEFAULT_CENTER_LABEL,
    }
    return _PLACEHOLDER_RE.sub(lambda m: values[PLACEHOLDERS[m.group(0)]], template)


def render_for_event(
    event: NotificationEvent,
    *,
    name: str,
    at: datetime,
    center_name: Optional[str],
    custom_template: Optional[str] = None,
) -> str:
    event = NotificationEvent(event)
    template = custom_template or DEFAULT_TEMPLATES[event]
    if event == NotificationEvent.STAFF_CHECK_IN:
        return render(template, name=name, time_text=staff_time(at), date_text=staff_date(at), center_name=center_name)
    return render(template, name=name, time_text=korean_time(at), date_text=korean_date(at), center_name=center_name)
