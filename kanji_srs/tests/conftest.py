import json
from datetime import datetime, timezone

import pytest

from kanji_srs.catalog import parse_catalog
from kanji_srs.data.preferences import MemoryPreferences, PreferencesReviewStore

KANJI = [
    {"kanji": "日", "meanings": ["day", "sun"], "onYomi": ["ニチ", "ジツ"], "kunYomi": ["ひ", "か"],
     "examples": ["日本", "毎日"], "jlpt": "N5"},
    {"kanji": "月", "meanings": ["month", "moon"], "onYomi": ["ゲツ", "ガツ"], "kunYomi": ["つき"],
     "examples": ["月曜日"], "jlpt": "N5"},
    {"kanji": "火", "meanings": ["fire"], "onYomi": ["カ"], "kunYomi": ["ひ"], "examples": ["火山"]},
    {"kanji": "水", "meanings": ["water"], "onYomi": ["スイ"], "kunYomi": ["みず"], "examples": ["水曜日"], "jlpt": "N5"},
]


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def kanji_json():
    return json.dumps(KANJI, ensure_ascii=False)


@pytest.fixture
def catalog(kanji_json):
    return parse_catalog(kanji_json)


@pytest.fixture
def prefs_store():
    return PreferencesReviewStore(MemoryPreferences(timeout=1.0), timeout=1.0)
