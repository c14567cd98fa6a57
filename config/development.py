import os

from .config import *  # noqa: F401,F403
from .config import build_logging, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
# Optional: also seed a demo center and admin account on startup
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")

SCHEDULER_ENABLED = env_bool("SCHEDULER_ENABLED", "1")

LOGGING = build_logging(os.getenv("LOG_LEVEL", "DEBUG").upper())
