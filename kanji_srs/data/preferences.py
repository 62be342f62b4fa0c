"""Preference-style key/value review store.

Records live in a flat mapping with one ``interval_<id>`` and one
``due_<id>`` key per item, the due date kept as epoch milliseconds in a
string::

    {"interval_12": 6, "due_12": "1718006400000"}
"""
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path

import structlog

from .base import schedule, select_due
from ..config import (
    DUE_KEY_PREFIX,
    FRESH_DUE_AT,
    INTERVAL_KEY_PREFIX,
    get_preferences_path,
    get_storage_timeout,
)
from ..domain.errors import StorageTimeout, StorageUnavailable
from ..domain.types import ReviewState, store_key
from ..utils.time import from_epoch_ms, to_epoch_ms, utcnow

logger = structlog.get_logger()


def interval_key(item_id):
    return f"{INTERVAL_KEY_PREFIX}{store_key(item_id)}"


def due_key(item_id):
    return f"{DUE_KEY_PREFIX}{store_key(item_id)}"


@contextmanager
def _locked(lock, timeout, what):
    if not lock.acquire(timeout=timeout):
        raise StorageTimeout(f"timed out after {timeout}s waiting for {what}")
    try:
        yield
    finally:
        lock.release()


class MemoryPreferences:
    """Process-local preferences. Nothing survives the process."""

    def __init__(self, initial=None, timeout=None):
        self._data = dict(initial or {})
        self._lock = threading.Lock()
        self.timeout = get_storage_timeout() if timeout is None else timeout

    def read(self, keys):
        with _locked(self._lock, self.timeout, "preferences"):
            return {k: self._data[k] for k in keys if k in self._data}

    def write(self, updates):
        with _locked(self._lock, self.timeout, "preferences"):
            self._data.update(updates)

    def snapshot(self):
        with _locked(self._lock, self.timeout, "preferences"):
            return dict(self._data)


class JsonFilePreferences(MemoryPreferences):
    """Preferences persisted as one JSON object on disk.

    Every write replaces the file atomically (temp file + rename); the
    in-memory view only changes once the new file is in place.
    """

    def __init__(self, path=None, timeout=None):
        self.path = Path(path or get_preferences_path())
        super().__init__(self._load(), timeout=timeout)

    def _load(self):
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            raise StorageUnavailable(f"cannot read preferences from {self.path}") from exc
        if not isinstance(data, dict):
            raise StorageUnavailable(f"preferences file {self.path} is not a JSON object")
        return data

    def write(self, updates):
        with _locked(self._lock, self.timeout, "preferences file"):
            staged = dict(self._data)
            staged.update(updates)
            tmp = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with tmp.open("w", encoding="utf-8") as fh:
                    json.dump(staged, fh, ensure_ascii=False, sort_keys=True)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp, self.path)
            except OSError as exc:
                raise StorageUnavailable(f"cannot write preferences to {self.path}") from exc
            self._data = staged


class PreferencesReviewStore:
    """ReviewStore over a preferences backend with one lock per item.

    Only the read-modify-write of a single item is serialized; the backend
    lock is held just for the individual read or write.
    """

    def __init__(self, preferences=None, timeout=None):
        self.preferences = preferences if preferences is not None else MemoryPreferences()
        self.timeout = get_storage_timeout() if timeout is None else timeout
        self._locks = {}
        self._locks_guard = threading.Lock()

    def _key_lock(self, item_id):
        with self._locks_guard:
            return self._locks.setdefault(store_key(item_id), threading.Lock())

    def _state(self, values, item_id):
        interval = values.get(interval_key(item_id))
        due = values.get(due_key(item_id))
        try:
            return ReviewState(
                interval_days=0 if interval is None else int(interval),
                due_at=FRESH_DUE_AT if due is None else from_epoch_ms(due),
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise StorageUnavailable(f"corrupt record for item {item_id}", item_id=item_id) from exc

    def get(self, item_id):
        values = self.preferences.read([interval_key(item_id), due_key(item_id)])
        return self._state(values, item_id)

    def apply(self, item_id, grade, now=None):
        now = now or utcnow()
        with _locked(self._key_lock(item_id), self.timeout, f"item {item_id}"):
            new_state = schedule(self.get(item_id), grade, now)
            due_ms = to_epoch_ms(new_state.due_at)
            try:
                self.preferences.write({
                    interval_key(item_id): new_state.interval_days,
                    due_key(item_id): str(due_ms),
                })
            except (StorageUnavailable, StorageTimeout) as exc:
                logger.warning("review_store_failed",
                    item_id=store_key(item_id),
                    backend=type(self.preferences).__name__,
                    error=str(exc),
                    retryable=exc.retryable,
                )
                raise
        # Report exactly what was persisted
        return ReviewState(interval_days=new_state.interval_days, due_at=from_epoch_ms(due_ms))

    def due_items(self, catalog, now=None):
        now = now or utcnow()
        catalog = list(catalog)
        keys = [key for item in catalog for key in (interval_key(item.id), due_key(item.id))]
        values = self.preferences.read(keys)
        state_by_key = {
            store_key(item.id): self._state(values, item.id)
            for item in catalog
        }
        return select_due(catalog, state_by_key, now)
