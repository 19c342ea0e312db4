"""
Memory Cache Implementation

Thread-safe in-memory cache with per-entry expiration and a background
sweep thread that evicts expired entries.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Optional, Any, Dict, Tuple

from ...core.protocols import CacheProtocol
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0


@dataclass
class CacheEntry:
    """Stored value with its expiry (monotonic seconds; None never expires)."""
    value: Any
    expires_at: Optional[float] = None
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCache(CacheProtocol):
    """In-memory expiring key-value store."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        sweep_interval: float = 0.0
    ):
        """
        Initialize memory cache.

        Args:
            default_ttl: TTL in seconds used by set(); <= 0 falls back to one hour
            sweep_interval: Seconds between expiry sweeps; <= 0 starts no sweep
        """
        if default_ttl <= 0:
            default_ttl = DEFAULT_TTL

        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

        self._stats_lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "swept": 0
        }

        self._close_lock = threading.Lock()
        self._closed = False
        self._stop_sweep = threading.Event()
        self._sweep_thread: Optional[threading.Thread] = None

        if sweep_interval > 0:
            self._sweep_thread = threading.Thread(
                target=self._sweep_loop,
                name="memory-cache-sweep",
                daemon=True
            )
            self._sweep_thread.start()
            logger.debug(f"Cache sweep started (interval={sweep_interval}s)")

    def __enter__(self) -> "MemoryCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, key: str) -> Tuple[Any, bool]:
        """Retrieve a value; expired entries are reported missing but left for the sweep."""
        now = time.monotonic()

        with self._lock.read_lock():
            entry = self._entries.get(key)

        if entry is None or entry.is_expired(now):
            self._record("misses")
            return None, False

        self._record("hits")
        return entry.value, True

    def set(self, key: str, value: Any) -> None:
        """Store a value with the default TTL."""
        self.set_with_expiration(key, value, self.default_ttl)

    def set_with_expiration(self, key: str, value: Any, ttl: float) -> None:
        """
        Store a value, replacing any existing entry.

        Args:
            key: Cache key
            value: Value to store
            ttl: 0 uses the default TTL, negative never expires
        """
        if ttl == 0:
            ttl = self.default_ttl

        now = time.monotonic()
        expires_at = now + ttl if ttl > 0 else None
        entry = CacheEntry(value=value, expires_at=expires_at, created_at=now)

        with self._lock.write_lock():
            self._entries[key] = entry

        self._record("sets")

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        with self._lock.write_lock():
            removed = self._entries.pop(key, None)

        if removed is not None:
            self._record("deletes")

    def clear(self) -> None:
        """Remove all entries in one step."""
        with self._lock.write_lock():
            self._entries = {}

    def count(self) -> int:
        """Stored entries, including expired ones the sweep has not reached."""
        with self._lock.read_lock():
            return len(self._entries)

    def delete_expired(self) -> int:
        """Evict every expired entry; returns how many were removed."""
        now = time.monotonic()

        with self._lock.write_lock():
            expired = [
                key for key, entry in self._entries.items()
                if entry.is_expired(now)
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            self._record("swept", len(expired))
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")

        return len(expired)

    def close(self) -> None:
        """Stop the background sweep. Entries are kept; repeated calls are no-ops."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            self._stop_sweep.set()

        thread = self._sweep_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
            logger.debug("Cache sweep stopped")

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._stats_lock:
            stats = dict(self._stats)

        total = stats["hits"] + stats["misses"]
        hit_rate = (stats["hits"] / total * 100) if total > 0 else 0.0

        return {
            "type": "memory",
            "size": self.count(),
            "default_ttl": self.default_ttl,
            "sweep_interval": self.sweep_interval,
            "closed": self._closed,
            "hit_rate": hit_rate,
            **stats
        }

    def _sweep_loop(self) -> None:
        while not self._stop_sweep.wait(self.sweep_interval):
            self.delete_expired()

    def _record(self, stat: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[stat] += amount
