from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_CENTER_TIMEZONE


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(tz_name: str = DEFAULT_CENTER_TIMEZONE) -> datetime:
    """Current center-local wall time (naive, as stored in the database).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def years_before(value: date, years: int = 1) -> date:
    try:
        return value.replace(year=value.year - int(years))
    except ValueError:
        # Feb 29 -> Feb 28
        return value.replace(year=value.year - int(years), day=28)


def days_before(value: date, days: int) -> date:
    return value - timedelta(days=int(days))


def month_bounds(year_month: str) -> tuple[date, date]:
    """'2025-01' -> (2025-01-01, 2025-01-31)."""
    start = datetime.strptime(year_month, "%Y-%m").date()
    next_month = (start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return start, next_month - timedelta(days=1)
