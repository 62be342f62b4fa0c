from datetime import datetime, timezone

from django.conf import settings

STORAGE_TIMEOUT_SECONDS = 5.0
PREFERENCES_PATH = "srs_prefs.json"

FRESH_DUE_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)  # always due
# One day short of datetime.max so the JST rendering never overflows
MAX_DUE_AT = datetime(9999, 12, 30, tzinfo=timezone.utc)

MIN_INTERVAL_DAYS = 1
HARD_RETENTION = (7, 10)  # ~70% of the previous interval
GROWTH = {
    2: 2,  # Good doubles
    3: 3,  # Easy triples
}

INTERVAL_KEY_PREFIX = "interval_"
DUE_KEY_PREFIX = "due_"


def _setting(name, default):
    if not settings.configured:
        return default
    return getattr(settings, name, default)


def get_storage_timeout() -> float:
    return float(_setting("KANJI_SRS_STORAGE_TIMEOUT", STORAGE_TIMEOUT_SECONDS))


def get_preferences_path() -> str:
    return str(_setting("KANJI_SRS_PREFERENCES_PATH", PREFERENCES_PATH))
