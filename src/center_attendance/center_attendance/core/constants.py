"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CODE_LENGTH = 4

DEFAULT_CENTER_TIMEZONE = "Asia/Seoul"
DEFAULT_HISTORY_DAYS = 30

ATTENDANCE_RETENTION_DAYS = 60
WORK_RECORD_RETENTION_YEARS = 1

CREDENTIALS_CACHE_TTL_SECONDS = 5 * 60
CREDENTIALS_CACHE_MAX_ENTRIES = 100
SMS_TIMEOUT_SECONDS = 10.0

LAST_PROMOTION_YEAR_KEY = "lastPromotionYear"
DEFAULT_CENTER_LABEL = "프라임수학"

# Korean school grades, one step per year. 고3 is terminal.
GRADE_PROGRESSION = {
    "초1": "초2",
    "초2": "초3",
    "초3": "초4",
    "초4": "초5",
    "초5": "초6",
    "초6": "중1",
    "중1": "중2",
    "중2": "중3",
    "중3": "고1",
    "고1": "고2",
    "고2": "고3",
    "고3": "고3",
}

# Short messages shown on the front-desk pad.
MSG_ALREADY_CHECKED_IN = "Already checked in today"
MSG_ALREADY_CHECKED_OUT = "Already checked out today"
MSG_CODE_NOT_FOUND = "Unregistered attendance code"
MSG_CODE_IN_USE = "This code is already in use"
MSG_INVALID_CODE = "Attendance code must be 4 digits"
