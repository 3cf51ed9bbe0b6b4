"""Tests for the JSON-file build cache."""

import json

from draft_coach.models.cache import CacheEntry
from draft_coach.services.build_cache import BuildCache


def test_missing_file_is_empty(tmp_path, clock):
    cache = BuildCache(tmp_path / "cache.json", clock=clock)
    assert cache.get("any") is None
    assert len(cache) == 0


def test_set_then_get_round_trips_entry(tmp_path, clock):
    cache = BuildCache(tmp_path / "nested" / "cache.json", clock=clock)

    written = cache.set("26.4|Jinx|adc||", "build text", "26.4")

    assert cache.path.exists()
    entry = cache.get("26.4|Jinx|adc||")
    assert entry == written
    assert entry.created_at == clock.now
    assert entry.origin == "grounded"


def test_persists_across_instances(tmp_path, clock):
    path = tmp_path / "cache.json"
    BuildCache(path, clock=clock).set("k", "text", "26.4")

    assert BuildCache(path, clock=clock).get("k").text == "text"


def test_overwrite_restamps_entry(tmp_path, clock):
    cache = BuildCache(tmp_path / "cache.json", clock=clock)
    cache.set("k", "old", "26.3")
    clock.advance(100)
    cache.set("k", "new", "26.4")

    entry = cache.get("k")
    assert entry.text == "new"
    assert entry.created_at == clock.now
    assert len(cache) == 1


def test_corrupt_file_treated_as_empty(tmp_path, clock):
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = BuildCache(path, clock=clock)

    assert cache.get("k") is None

    cache.set("k", "text", "26.4")
    assert json.loads(path.read_text(encoding="utf-8"))["k"]["text"] == "text"


def test_malformed_entry_skipped(tmp_path, clock):
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps({
            "good": {"key": "good", "created_at": 1.0, "text": "t", "patch_detected": "26.4"},
            "bad": {"text": "missing key and timestamp"},
        }),
        encoding="utf-8",
    )

    cache = BuildCache(path, clock=clock)
    assert cache.get("good").text == "t"
    assert cache.get("bad") is None


def test_entry_freshness_boundary():
    entry = CacheEntry(key="k", created_at=1000.0, text="t", patch_detected="26.4")
    assert entry.is_fresh(1000.0 + 86399, 86400)
    assert not entry.is_fresh(1000.0 + 86400, 86400)
