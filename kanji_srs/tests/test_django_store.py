import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from django.db import OperationalError, connection
from django.test.utils import CaptureQueriesContext

from kanji_srs.config import FRESH_DUE_AT
from kanji_srs.data.models import ItemSchedule
from kanji_srs.data.repos import DjangoReviewStore
from kanji_srs.domain.enums import Grade
from kanji_srs.domain.errors import StorageTimeout, StorageUnavailable
from kanji_srs.domain.logic import compute_next_interval
from kanji_srs.domain.types import ReviewState

logger = logging.getLogger(__name__)


@pytest.fixture
def store():
    return DjangoReviewStore()


@pytest.mark.django_db
def test_get_without_record_is_fresh(store):
    assert store.get(0) == ReviewState(interval_days=0, due_at=FRESH_DUE_AT)
    assert store.get(0) == store.get(0)
    assert not ItemSchedule.objects.exists()


@pytest.mark.django_db
def test_first_apply_creates_row(store, now):
    state = store.apply(0, Grade.GOOD, now)

    sched = ItemSchedule.objects.get(item_id="0")
    assert sched.interval_days == state.interval_days == 2
    assert sched.due_at == state.due_at == now + timedelta(days=2)
    assert sched.reviewed_at == now
    assert store.get(0) == state
    logger.info("✓ first grading stored: %s", sched)


@pytest.mark.django_db
def test_apply_updates_row_in_place(store, now):
    store.apply("月", Grade.EASY, now)
    state = store.apply("月", Grade.GOOD, now)

    assert state.interval_days == 8
    assert ItemSchedule.objects.filter(item_id="月").count() == 1


@pytest.mark.django_db
def test_again_resets_to_due_now(store, now):
    store.apply(1, Grade.EASY, now)
    state = store.apply(1, Grade.AGAIN, now)
    assert state == ReviewState(interval_days=0, due_at=now)


@pytest.mark.django_db
def test_due_items_and_fallback(store, catalog, now):
    store.apply(1, Grade.GOOD, now)
    store.apply(3, Grade.GOOD, now)
    assert [item.id for item in store.due_items(catalog, now)] == [0, 2]

    # Two days later both graded items are due again
    later = now + timedelta(days=2)
    assert store.due_items(catalog, later) == list(catalog)

    store.apply(0, Grade.GOOD, now)
    store.apply(2, Grade.GOOD, now)
    assert store.due_items(catalog, now) == list(catalog)


@pytest.mark.django_db
def test_failed_save_leaves_previous_state(store, now, monkeypatch):
    before = store.apply(2, Grade.GOOD, now)

    def boom(self, *args, **kwargs):
        raise OperationalError("disk I/O error")

    monkeypatch.setattr(ItemSchedule, "save", boom)
    with pytest.raises(StorageUnavailable) as exc_info:
        store.apply(2, Grade.EASY, now)
    monkeypatch.undo()

    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert store.get(2) == before


@pytest.mark.django_db
def test_failed_first_save_creates_nothing(store, now, monkeypatch):
    def boom(self, *args, **kwargs):
        raise OperationalError("unable to open database file")

    monkeypatch.setattr(ItemSchedule, "save", boom)
    with pytest.raises(StorageUnavailable):
        store.apply(5, Grade.GOOD, now)
    monkeypatch.undo()

    assert not ItemSchedule.objects.filter(item_id="5").exists()


@pytest.mark.django_db
def test_locked_database_is_a_timeout(store, now, monkeypatch):
    def boom(self, *args, **kwargs):
        raise OperationalError("database is locked")

    monkeypatch.setattr(ItemSchedule, "save", boom)
    with pytest.raises(StorageTimeout) as exc_info:
        store.apply(6, Grade.HARD, now)
    assert exc_info.value.retryable
    assert exc_info.value.item_id == 6


def _apply_in_thread(item_id, grade, now):
    try:
        return DjangoReviewStore().apply(item_id, grade, now)
    finally:
        connection.close()


@pytest.mark.django_db(transaction=True)
def test_concurrent_applies_on_distinct_ids(now):
    ids = list(range(100))
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda i: _apply_in_thread(i, Grade.GOOD, now), ids))

    assert all(r.interval_days == 2 for r in results)
    assert ItemSchedule.objects.count() == 100
    assert set(ItemSchedule.objects.values_list("interval_days", flat=True)) == {2}


@pytest.mark.django_db(transaction=True)
def test_concurrent_applies_on_same_id_lose_no_update(now):
    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda _: _apply_in_thread("日", Grade.GOOD, now), range(100)))

    expected = 0
    for _ in range(100):
        expected = compute_next_interval(expected, Grade.GOOD)
    assert ItemSchedule.objects.count() == 1
    assert DjangoReviewStore().get("日").interval_days == expected
    logger.info("✓ 100 concurrent Good gradings serialized on one row")


@pytest.mark.django_db
def test_intervals_beyond_64_bits_are_stored(store, now):
    ItemSchedule.objects.create(item_id="0", interval_days=2**70)

    state = store.apply(0, Grade.EASY, now)
    assert state.interval_days == (2**70 + 1) * 3
    assert store.get(0) == state
    assert ItemSchedule.objects.get(item_id="0").interval_days == (2**70 + 1) * 3


@pytest.mark.django_db
def test_repeated_easy_gradings_keep_growing(store, now):
    for _ in range(45):
        state = store.apply(0, Grade.EASY, now)
    assert state.interval_days > 2**63
    assert store.get(0).interval_days == state.interval_days


@pytest.mark.django_db
def test_apply_writes_before_reading(store, now):
    store.apply(3, Grade.GOOD, now)
    with CaptureQueriesContext(connection) as ctx:
        store.apply(3, Grade.GOOD, now)

    statements = [q["sql"].lstrip().upper() for q in ctx.captured_queries]
    data_statements = [s for s in statements if s.startswith(("SELECT", "UPDATE", "INSERT"))]
    assert data_statements[0].startswith("UPDATE")
