"""Run the daily maintenance jobs once, e.g. from cron when the web scheduler is off.

Usage: python scripts/run_maintenance.py [promotion|checkouts|retention ...]
"""

from __future__ import annotations

import importlib
import logging.config
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.center_attendance.center_attendance.container import build_container


def main(argv: list[str]) -> None:
    settings = importlib.import_module(get_settings_module())
    logging.config.dictConfig(settings.LOGGING)
    container = build_container(
        db_config=settings.DB_CONFIG,
        tz_name=settings.CENTER_TIMEZONE,
        attendance_retention_days=settings.ATTENDANCE_RETENTION_DAYS,
        work_record_retention_years=settings.WORK_RECORD_RETENTION_YEARS,
    )
    service = container.maintenance_service

    jobs = {
        "promotion": service.promote_grades,
        "checkouts": service.mark_missing_checkouts,
        "retention": service.prune_retention,
    }
    selected = argv or list(jobs)
    unknown = [name for name in selected if name not in jobs]
    if unknown:
        raise SystemExit(f"Unknown job(s): {', '.join(unknown)}. Choose from {', '.join(jobs)}")

    for name in selected:
        print(f"{name}: {jobs[name]()}")


if __name__ == "__main__":
    main(sys.argv[1:])
