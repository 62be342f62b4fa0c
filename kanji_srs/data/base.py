from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Protocol

from ..domain.logic import compute_due_at, compute_next_interval
from ..domain.types import Item, ItemId, ReviewState, store_key


class ReviewStore(Protocol):
    """Per-item scheduling state, swappable without touching scheduling."""

    def get(self, item_id: ItemId) -> ReviewState:
        ...

    def apply(self, item_id: ItemId, grade, now: Optional[datetime] = None) -> ReviewState:
        ...

    def due_items(self, catalog: Iterable[Item], now: Optional[datetime] = None) -> List[Item]:
        ...


def schedule(current: ReviewState, grade, now: datetime) -> ReviewState:
    interval = compute_next_interval(current.interval_days, grade)
    return ReviewState(interval_days=interval, due_at=compute_due_at(now, interval))


def select_due(catalog: Iterable[Item], state_by_key: Mapping[str, ReviewState], now: datetime) -> List[Item]:
    """Items due at ``now`` in catalog order.

    Items without a record are fresh and therefore due. When nothing is
    due the whole catalog is returned so a session always has something
    to review.
    """
    catalog = list(catalog)
    due = [
        item for item in catalog
        if state_by_key.get(store_key(item.id), ReviewState.fresh()).is_due(now)
    ]
    return due or catalog
