"""
Tests for the in-memory cache store.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from gem_registry.core.protocols import CacheProtocol
from gem_registry.infrastructure.cache import DEFAULT_TTL, MemoryCache, ReadWriteLock


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class TestBasicOperations:
    """Test get/set/delete/clear/count."""

    def test_set_and_get(self, memory_cache: MemoryCache) -> None:
        """Test a stored value is returned."""
        memory_cache.set("k", "v")
        assert memory_cache.get("k") == ("v", True)

    def test_missing_key(self, memory_cache: MemoryCache) -> None:
        """Test a missing key reports not found."""
        assert memory_cache.get("missing") == (None, False)

    def test_set_replaces_existing(self, memory_cache: MemoryCache) -> None:
        """Test set overwrites value and count stays 1."""
        memory_cache.set("k", "old")
        memory_cache.set("k", "new")
        assert memory_cache.get("k") == ("new", True)
        assert memory_cache.count() == 1

    def test_delete(self, memory_cache: MemoryCache) -> None:
        """Test delete removes a key and ignores missing ones."""
        memory_cache.set("k", "v")
        memory_cache.delete("k")
        memory_cache.delete("never-set")
        assert memory_cache.get("k") == (None, False)
        assert memory_cache.count() == 0

    def test_clear(self, memory_cache: MemoryCache) -> None:
        """Test clear empties the store."""
        for i in range(10):
            memory_cache.set(f"k{i}", i)
        assert memory_cache.count() == 10

        memory_cache.clear()
        assert memory_cache.count() == 0
        assert memory_cache.get("k3") == (None, False)

    def test_stores_any_value(self, memory_cache: MemoryCache) -> None:
        """Test arbitrary values including falsy ones."""
        memory_cache.set("none", None)
        memory_cache.set("list", [1, 2])
        memory_cache.set("zero", 0)

        assert memory_cache.get("none") == (None, True)
        assert memory_cache.get("list") == ([1, 2], True)
        assert memory_cache.get("zero") == (0, True)

    def test_implements_protocol(self, memory_cache: MemoryCache) -> None:
        """Test MemoryCache satisfies CacheProtocol."""
        assert isinstance(memory_cache, CacheProtocol)


class TestExpiration:
    """Test TTL handling."""

    def test_entry_expires(self) -> None:
        """Test value found before its TTL and missing after."""
        with MemoryCache() as cache:
            cache.set_with_expiration("k", "v", 0.05)
            assert cache.get("k") == ("v", True)

            time.sleep(0.1)
            _, found = cache.get("k")
            assert found is False

    def test_negative_ttl_never_expires(self) -> None:
        """Test ttl < 0 outlives the default TTL."""
        with MemoryCache(default_ttl=0.05) as cache:
            cache.set_with_expiration("forever", "v", -1)
            cache.set("default", "v")

            time.sleep(0.15)

            assert cache.get("forever") == ("v", True)
            assert cache.get("default") == (None, False)

    def test_zero_ttl_uses_default(self) -> None:
        """Test ttl == 0 falls back to the default TTL."""
        with MemoryCache(default_ttl=0.05) as cache:
            cache.set_with_expiration("k", "v", 0)
            assert cache.get("k") == ("v", True)

            time.sleep(0.1)
            assert cache.get("k") == (None, False)

    @pytest.mark.parametrize("default_ttl", [0, -5])
    def test_non_positive_default_ttl_means_one_hour(self, default_ttl: float) -> None:
        """Test default_ttl <= 0 is replaced by one hour."""
        with MemoryCache(default_ttl=default_ttl) as cache:
            assert cache.default_ttl == DEFAULT_TTL == 3600.0

    def test_get_does_not_evict(self) -> None:
        """Test an expired entry stays counted until it is swept."""
        with MemoryCache() as cache:
            cache.set_with_expiration("k", "v", 0.01)
            time.sleep(0.05)

            assert cache.get("k") == (None, False)
            assert cache.count() == 1

            assert cache.delete_expired() == 1
            assert cache.count() == 0

    def test_delete_expired_keeps_live_entries(self) -> None:
        """Test delete_expired only removes expired entries."""
        with MemoryCache() as cache:
            cache.set_with_expiration("short", 1, 0.01)
            cache.set_with_expiration("long", 2, 60)
            cache.set_with_expiration("forever", 3, -1)
            time.sleep(0.05)

            assert cache.delete_expired() == 1
            assert cache.count() == 2
            assert cache.get("long") == (2, True)


class TestSweep:
    """Test the background sweep thread."""

    @pytest.mark.slow
    def test_sweep_eventually_evicts(self) -> None:
        """Test expired entries are physically removed by the sweep."""
        with MemoryCache(default_ttl=60, sweep_interval=0.05) as cache:
            cache.set_with_expiration("expiring", "v", 0.05)
            cache.set("kept", "v")
            assert cache.count() == 2

            # expiry (0.05) + interval (0.05) + slack
            assert wait_for(lambda: cache.count() == 1, timeout=1.0)
            assert cache.get("kept") == ("v", True)
            assert cache.get_stats()["swept"] >= 1

    def test_no_sweep_thread_without_interval(self) -> None:
        """Test sweep_interval <= 0 starts no thread."""
        with MemoryCache(sweep_interval=0) as cache:
            assert cache._sweep_thread is None

    def test_close_stops_sweep(self) -> None:
        """Test close joins the sweep thread."""
        cache = MemoryCache(sweep_interval=0.01)
        thread = cache._sweep_thread
        assert thread is not None and thread.is_alive()

        cache.close()

        assert not thread.is_alive()
        assert cache.closed

    def test_close_is_idempotent(self) -> None:
        """Test calling close twice never raises."""
        cache = MemoryCache(sweep_interval=0.01)
        cache.close()
        cache.close()
        assert cache.closed

    def test_concurrent_close(self) -> None:
        """Test racing close calls all return."""
        cache = MemoryCache(sweep_interval=0.01)
        threads = [threading.Thread(target=cache.close) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=2.0)

        assert all(not thread.is_alive() for thread in threads)
        assert cache.closed


class TestConcurrency:
    """Test access from several threads."""

    def test_parallel_writers_and_readers(self) -> None:
        """Test concurrent sets and gets leave a consistent store."""
        with MemoryCache(sweep_interval=0.01) as cache:
            def writer(worker: int) -> None:
                for i in range(200):
                    cache.set(f"{worker}:{i}", i)

            def reader(worker: int) -> None:
                for i in range(200):
                    value, found = cache.get(f"{worker}:{i}")
                    assert not found or value == i

            with ThreadPoolExecutor(max_workers=8) as pool:
                futures = [pool.submit(writer, w) for w in range(4)]
                futures += [pool.submit(reader, w) for w in range(4)]
                for future in futures:
                    future.result()

            assert cache.count() == 800


class TestReadWriteLock:
    """Test the reader/writer lock."""

    def test_readers_share(self) -> None:
        """Test two readers hold the lock at once."""
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=2.0)

        def read() -> None:
            with lock.read_lock():
                inside.wait()

        threads = [threading.Thread(target=read) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=3.0)

        assert not inside.broken

    def test_writer_excludes_readers(self) -> None:
        """Test a reader waits for the writer."""
        lock = ReadWriteLock()
        events = []

        lock.acquire_write()

        def read() -> None:
            with lock.read_lock():
                events.append("read")

        thread = threading.Thread(target=read)
        thread.start()
        time.sleep(0.05)
        events.append("write done")
        lock.release_write()
        thread.join(timeout=2.0)

        assert events == ["write done", "read"]


class TestStats:
    """Test statistics."""

    def test_hits_and_misses(self, memory_cache: MemoryCache) -> None:
        """Test hit/miss counters and hit rate."""
        memory_cache.set("k", "v")
        memory_cache.get("k")
        memory_cache.get("k")
        memory_cache.get("missing")

        stats = memory_cache.get_stats()
        assert stats["type"] == "memory"
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["sets"] == 1
        assert stats["size"] == 1
        assert stats["hit_rate"] == pytest.approx(200 / 3)
