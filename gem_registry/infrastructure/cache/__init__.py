"""
Cache Infrastructure

In-memory cache implementation.
"""

from .memory_cache import MemoryCache, CacheEntry, DEFAULT_TTL
from .locks import ReadWriteLock

__all__ = [
    "MemoryCache",
    "CacheEntry",
    "DEFAULT_TTL",
    "ReadWriteLock",
]
