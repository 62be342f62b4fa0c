import structlog
from django.db import DatabaseError, OperationalError, transaction

from .base import schedule, select_due
from .models import ItemSchedule
from ..domain.errors import StorageTimeout, StorageUnavailable
from ..domain.types import ReviewState, store_key
from ..utils.time import utcnow

logger = structlog.get_logger()

_TIMEOUT_MARKERS = ("locked", "lock timeout", "lock_timeout", "timeout", "timed out")


def _storage_error(exc, item_id=None):
    message = str(exc)
    if isinstance(exc, OperationalError) and any(m in message.lower() for m in _TIMEOUT_MARKERS):
        return StorageTimeout(f"review store timed out: {message}", item_id=item_id)
    return StorageUnavailable(f"review store unavailable: {message}", item_id=item_id)


def _to_state(sched):
    return ReviewState(interval_days=sched.interval_days, due_at=sched.due_at)


class DjangoReviewStore:
    """ReviewStore backed by the ``ItemSchedule`` table.

    ``apply`` holds a row lock for the whole read-modify-write, so updates
    of the same item serialize while other items proceed. The lock wait is
    bounded by the database connection's own timeout (``OPTIONS["timeout"]``
    on SQLite, ``lock_timeout`` on PostgreSQL).
    """

    def __init__(self, using="default"):
        self.using = using

    def _objects(self):
        return ItemSchedule.objects.using(self.using)

    def get(self, item_id):
        try:
            sched = self._objects().filter(item_id=store_key(item_id)).first()
        except DatabaseError as exc:
            raise _storage_error(exc, item_id) from exc
        return _to_state(sched) if sched else ReviewState.fresh()

    def apply(self, item_id, grade, now=None):
        now = now or utcnow()
        key = store_key(item_id)
        try:
            with transaction.atomic(using=self.using):
                # Write before reading: SQLite cannot upgrade a shared lock under
                # contention, but it does wait for a write lock.
                touched = self._objects().filter(item_id=key).update(reviewed_at=now)
                if not touched:
                    self._objects().get_or_create(item_id=key, defaults={"reviewed_at": now})
                sched = self._objects().select_for_update().get(item_id=key)

                new_state = schedule(_to_state(sched), grade, now)
                sched.interval_days = new_state.interval_days
                sched.due_at = new_state.due_at
                sched.reviewed_at = now
                sched.save(update_fields=["interval_days", "due_at", "reviewed_at"])
        except DatabaseError as exc:
            error = _storage_error(exc, item_id)
            logger.warning("review_store_failed",
                item_id=key,
                backend="django",
                error=str(exc),
                retryable=error.retryable,
            )
            raise error from exc
        return new_state

    def due_items(self, catalog, now=None):
        now = now or utcnow()
        catalog = list(catalog)
        keys = [store_key(item.id) for item in catalog]
        try:
            state_by_key = {
                sched.item_id: _to_state(sched)
                for sched in self._objects().filter(item_id__in=keys)
            }
        except DatabaseError as exc:
            raise _storage_error(exc) from exc
        return select_due(catalog, state_by_key, now)
