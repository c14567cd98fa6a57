from .config import *  # noqa: F401,F403
from .config import build_logging

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

SCHEDULER_ENABLED = False

# Never hit a real gateway from tests.
SMS_ENV_CREDENTIALS = {}
CREDENTIALS_ENCRYPTION_KEY = None

LOGGING = build_logging("WARNING")
