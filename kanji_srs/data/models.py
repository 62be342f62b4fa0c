from django.db import models

from ..config import FRESH_DUE_AT


class UnboundedIntegerField(models.TextField):
    """Non-negative integer of any size, stored as its decimal text."""

    def from_db_value(self, value, expression, connection):
        return None if value is None else int(value)

    def to_python(self, value):
        if value is None or isinstance(value, int):
            return value
        return int(value)

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        return None if value is None else str(int(value))


class ItemSchedule(models.Model):
    item_id = models.CharField(max_length=64, unique=True)
    interval_days = UnboundedIntegerField(default=0)
    due_at = models.DateTimeField(default=FRESH_DUE_AT)  # UTC
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["due_at"], name="item_schedule_due_at_idx"),
        ]

    def __str__(self):
        return f"{self.item_id}: {self.interval_days}d"
