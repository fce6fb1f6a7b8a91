"""
Unit tests for the TTL + least-recently-accessed result cache.
"""
import pytest

from account_validator.validation.cache import ResultCache, cache_key


@pytest.fixture
def cache(fake_clock):
    return ResultCache(ttl_ms=1000, max_size=3, clock=fake_clock)


class TestGetSet:
    def test_miss_on_empty(self, cache):
        assert cache.get("validate:1@s.whatsapp.net") is None
        assert cache.stats()["misses"] == 1

    def test_hit_updates_access_bookkeeping(self, cache, fake_clock):
        cache.set("a", {"v": 1})
        fake_clock.advance(10)

        assert cache.get("a") == {"v": 1}

        entry = cache.entry("a")
        assert entry.access_count == 2
        assert entry.last_access_ms == 10
        assert entry.created_at_ms == 0

    def test_stored_value_is_a_snapshot(self, cache):
        value = {"items": [1]}
        cache.set("a", value)
        value["items"].append(2)

        assert cache.get("a") == {"items": [1]}

    def test_returned_value_is_a_copy(self, cache):
        cache.set("a", {"items": [1]})

        first = cache.get("a")
        first["items"].append(2)
        second = cache.get("a")

        assert second == {"items": [1]}
        assert second is not first

    def test_cache_key_is_namespaced(self):
        assert cache_key("201234567890@s.whatsapp.net") == "validate:201234567890@s.whatsapp.net"


class TestExpiry:
    def test_entry_alive_at_exact_ttl(self, cache, fake_clock):
        cache.set("a", 1)
        fake_clock.advance(1000)
        assert cache.get("a") == 1

    def test_entry_expires_after_ttl(self, cache, fake_clock):
        cache.set("a", 1)
        fake_clock.advance(1001)

        assert cache.get("a") is None
        assert "a" not in cache
        assert cache.stats()["misses"] == 1

    def test_expiry_is_lazy(self, cache, fake_clock):
        cache.set("a", 1)
        fake_clock.advance(5000)
        assert len(cache) == 1


class TestEviction:
    def test_capacity_plus_one_evicts_oldest_access(self, cache, fake_clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            fake_clock.advance(1)

        cache.set("d", "d")

        assert len(cache) == 3
        assert "a" not in cache
        assert all(k in cache for k in ("b", "c", "d"))

    def test_recent_access_protects_entry(self, cache, fake_clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            fake_clock.advance(1)
        cache.get("a")
        fake_clock.advance(1)

        cache.set("d", "d")

        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_at_capacity_does_not_evict(self, cache):
        for key in ("a", "b", "c"):
            cache.set(key, key)

        cache.set("b", "b2")

        assert len(cache) == 3
        assert cache.get("b") == "b2"

    def test_size_never_exceeds_capacity(self, cache, fake_clock):
        for i in range(20):
            cache.set(f"k{i}", i)
            fake_clock.advance(1)
            assert len(cache) <= cache.max_size


class TestStats:
    def test_hit_rate(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("missing")

        stats = cache.stats()

        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(2 / 3)
        assert stats["max_size"] == 3
        assert stats["size"] == 1

    def test_hit_rate_zero_without_requests(self, cache):
        assert cache.stats()["hit_rate"] == 0.0

    def test_clear_resets_entries_and_counters(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")

        cache.clear()

        assert cache.stats() == {"size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0, "max_size": 3}

    @pytest.mark.parametrize("kwargs", [{"max_size": 0}, {"ttl_ms": 0}])
    def test_invalid_configuration_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ResultCache(**kwargs)
