from datetime import datetime, timedelta

from .enums import Grade
from ..config import GROWTH, HARD_RETENTION, MAX_DUE_AT, MIN_INTERVAL_DAYS


def compute_next_interval(old_interval_days: int, grade) -> int:
    if old_interval_days < 0:
        raise ValueError(f"interval must be non-negative, got {old_interval_days}")
    grade = Grade(grade)

    if grade == Grade.AGAIN:
        return 0

    if grade == Grade.HARD:
        num, den = HARD_RETENTION
        return max(MIN_INTERVAL_DAYS, old_interval_days * num // den) + 1

    return max(MIN_INTERVAL_DAYS, (old_interval_days + 1) * GROWTH[int(grade)])


def compute_due_at(now: datetime, new_interval_days: int) -> datetime:
    """Whole calendar days after ``now``.

    Aware datetimes keep their wall-clock time across DST changes in their
    own zone. Intervals past the calendar's end pin to ``MAX_DUE_AT``.
    """
    try:
        return now + timedelta(days=new_interval_days)
    except OverflowError:
        return MAX_DUE_AT
