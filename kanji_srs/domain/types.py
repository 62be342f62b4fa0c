from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple, Union

from ..config import FRESH_DUE_AT

ItemId = Union[int, str]


@dataclass(frozen=True)
class KanjiCard:
    kanji: str
    meanings: Tuple[str, ...] = ()
    on_yomi: Tuple[str, ...] = ()
    kun_yomi: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()
    jlpt: Optional[str] = None


@dataclass(frozen=True)
class Item:
    """Catalog entry. The payload is opaque to scheduling."""

    id: ItemId
    payload: Any = None


@dataclass(frozen=True)
class ReviewState:
    interval_days: int = 0
    due_at: datetime = FRESH_DUE_AT

    @classmethod
    def fresh(cls) -> "ReviewState":
        return cls()

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now


def store_key(item_id: ItemId) -> str:
    # Records are keyed by the textual form of the id
    return str(item_id)
