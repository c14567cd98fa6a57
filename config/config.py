"""Settings shared by every environment.

Environment modules import from here and override what differs.
"""
import os

from dotenv import load_dotenv

load_dotenv(override=False)


def env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "center_attendance"),
}

CENTER_TIMEZONE = os.getenv("CENTER_TIMEZONE", "Asia/Seoul")

# Outbound SMS
SMS_API_URL = os.getenv("SMS_API_URL", "https://api.solapi.com/messages/v4/send")
SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "10"))

# Fallback credentials for centers that have none stored, keyed by center name.
SMS_ENV_CREDENTIALS = {
    "DMC센터": {
        "api_key": os.getenv("SOLAPI_API_KEY_DMC"),
        "api_secret": os.getenv("SOLAPI_API_SECRET_DMC"),
        "sender_number": os.getenv("SOLAPI_SENDER_NUMBER_DMC"),
    },
    "목동센터": {
        "api_key": os.getenv("SOLAPI_API_KEY"),
        "api_secret": os.getenv("SOLAPI_API_SECRET"),
        "sender_number": os.getenv("SOLAPI_SENDER_NUMBER_MOKDONG"),
    },
}

# Fernet key for sms_credentials.api_key / api_secret
CREDENTIALS_ENCRYPTION_KEY = os.getenv("CREDENTIALS_ENCRYPTION_KEY") or None
CREDENTIALS_CACHE_TTL_SECONDS = int(os.getenv("CREDENTIALS_CACHE_TTL_SECONDS", "300"))
CREDENTIALS_CACHE_MAX_ENTRIES = int(os.getenv("CREDENTIALS_CACHE_MAX_ENTRIES", "100"))

ATTENDANCE_RETENTION_DAYS = int(os.getenv("ATTENDANCE_RETENTION_DAYS", "60"))
WORK_RECORD_RETENTION_YEARS = int(os.getenv("WORK_RECORD_RETENTION_YEARS", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def build_logging(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "detailed",
                "level": level,
            },
        },
        "loggers": {
            "center_attendance": {"handlers": ["console"], "level": level, "propagate": False},
            "src.center_attendance": {"handlers": ["console"], "level": level, "propagate": False},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    }


LOGGING = build_logging(LOG_LEVEL)
