"""
Tests for the TTL snapshot cache.

A fake clock drives expiry so nothing sleeps.
"""
from tacotrack.utils.cache import DataCache


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_cache(ttl=300):
    clock = FakeClock()
    return DataCache(ttl=ttl, clock=clock), clock


class TestDataCache:
    def test_miss_returns_none(self):
        cache, _ = make_cache()
        assert cache.get("ingredients") is None

    def test_fresh_entry_served(self):
        cache, clock = make_cache()
        cache.set("ingredients", ["beef"])
        clock.advance(299)
        assert cache.get("ingredients") == ["beef"]

    def test_entry_expires_at_ttl(self):
        cache, clock = make_cache()
        cache.set("ingredients", ["beef"])
        clock.advance(300)
        assert cache.get("ingredients") is None

    def test_get_or_fetch_fetches_once(self):
        cache, _ = make_cache()
        calls = []

        def fetch():
            calls.append(1)
            return ["beef"]

        assert cache.get_or_fetch("ingredients", fetch) == ["beef"]
        assert cache.get_or_fetch("ingredients", fetch) == ["beef"]
        assert len(calls) == 1

    def test_get_or_fetch_refetches_after_expiry(self):
        cache, clock = make_cache(ttl=10)
        values = iter([["old"], ["new"]])
        cache.get_or_fetch("recipes", lambda: next(values))
        clock.advance(11)
        assert cache.get_or_fetch("recipes", lambda: next(values)) == ["new"]

    def test_empty_list_is_cached(self):
        cache, _ = make_cache()
        calls = []
        cache.get_or_fetch("waste", lambda: calls.append(1) or [])
        cache.get_or_fetch("waste", lambda: calls.append(1) or [])
        assert len(calls) == 1

    def test_invalidate_one_kind(self):
        cache, _ = make_cache()
        cache.set("ingredients", [1])
        cache.set("recipes", [2])
        assert cache.invalidate("ingredients") == 1
        assert cache.get("ingredients") is None
        assert cache.get("recipes") == [2]

    def test_invalidate_missing_kind(self):
        cache, _ = make_cache()
        assert cache.invalidate("waste") == 0

    def test_invalidate_all(self):
        cache, _ = make_cache()
        cache.set("ingredients", [1])
        cache.set("recipes", [2])
        assert cache.invalidate() == 2
        assert cache.status()["entries"] == {}

    def test_status_reports_age(self):
        cache, clock = make_cache(ttl=60)
        cache.set("ingredients", [1])
        clock.advance(90)
        status = cache.status()
        assert status["ttl_seconds"] == 60
        assert status["entries"]["ingredients"] == {"age_seconds": 90.0, "fresh": False}
