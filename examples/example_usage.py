"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.center_attendance.center_attendance.container import build_container
from src.center_attendance.center_attendance.core.exceptions import DomainError


def main(center_id: int, code: str):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, tz_name=settings.CENTER_TIMEZONE)

    try:
        resolution = container.resolver.resolve(center_id, code)
    except DomainError as e:
        print(f"{code}: {e}")
        return
    print(f"{code} -> {resolution.kind.value} #{resolution.owner_id} via {resolution.via.value}")

    for code_row in container.code_registry.list_codes(center_id):
        print(code_row.code, code_row.owner_kind.value, code_row.owner_id)


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1, sys.argv[2] if len(sys.argv) > 2 else "5678")
