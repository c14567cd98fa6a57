from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .codes.controller import register as register_codes
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .staff.controller import register as register_staff
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, container: Container | None = None, start_scheduler: bool | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.config.dictConfig(getattr(settings, "LOGGING"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_data(db_config)
            logger.info("Demo data ready")

        container = build_container(
            db_config=db_config,
            tz_name=getattr(settings, "CENTER_TIMEZONE"),
            sms_api_url=getattr(settings, "SMS_API_URL"),
            sms_timeout_seconds=getattr(settings, "SMS_TIMEOUT_SECONDS"),
            sms_env_credentials=getattr(settings, "SMS_ENV_CREDENTIALS"),
            credentials_encryption_key=getattr(settings, "CREDENTIALS_ENCRYPTION_KEY"),
            credentials_cache_ttl_seconds=getattr(settings, "CREDENTIALS_CACHE_TTL_SECONDS"),
            credentials_cache_max_entries=getattr(settings, "CREDENTIALS_CACHE_MAX_ENTRIES"),
            attendance_retention_days=getattr(settings, "ATTENDANCE_RETENTION_DAYS"),
            work_record_retention_years=getattr(settings, "WORK_RECORD_RETENTION_YEARS"),
        )

    register_users(app, container)
    register_codes(app, container)
    register_attendance(app, container)
    register_staff(app, container)
    app.extensions["center_attendance"] = container

    if start_scheduler is None:
        start_scheduler = bool(getattr(settings, "SCHEDULER_ENABLED", False))
    if start_scheduler:
        container.scheduler.start()

    return app
