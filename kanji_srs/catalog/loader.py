import json
from pathlib import Path

import structlog

from .serializers import KanjiEntrySerializer
from ..domain.errors import CatalogEmpty, CatalogInvalid
from ..domain.types import Item, KanjiCard

logger = structlog.get_logger()


def _to_card(data):
    return KanjiCard(
        kanji=data["kanji"],
        meanings=tuple(data["meanings"]),
        on_yomi=tuple(data["onYomi"]),
        kun_yomi=tuple(data["kunYomi"]),
        examples=tuple(data["examples"]),
        jlpt=data.get("jlpt"),
    )


def parse_catalog(text):
    """Build the ordered catalog from a JSON array of kanji entries.

    Each entry's id is its position in the array, so ids stay stable as
    long as the source file is only ever appended to.
    """
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8")
    try:
        entries = json.loads(text)
    except ValueError as exc:
        raise CatalogInvalid(f"catalog is not valid JSON: {exc}") from exc

    if not isinstance(entries, list):
        raise CatalogInvalid("catalog must be a JSON array")
    if not entries:
        raise CatalogEmpty("catalog contains no entries")

    items = []
    for index, entry in enumerate(entries):
        s = KanjiEntrySerializer(data=entry)
        if not s.is_valid():
            raise CatalogInvalid(f"catalog entry {index} is invalid", index=index, errors=dict(s.errors))
        items.append(Item(id=index, payload=_to_card(s.validated_data)))
    return tuple(items)


def load_catalog(path):
    path = Path(path)
    items = parse_catalog(path.read_text(encoding="utf-8"))
    logger.info("catalog_loaded", path=str(path), total=len(items))
    return items
