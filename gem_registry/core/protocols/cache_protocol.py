"""
Cache Protocol Definition

Defines the interface for expiring key-value stores.
"""

from typing import Protocol, Any, Tuple, runtime_checkable


@runtime_checkable
class CacheProtocol(Protocol):
    """Protocol for cache implementations."""

    def get(self, key: str) -> Tuple[Any, bool]:
        """
        Retrieve a value from cache.

        Args:
            key: Cache key

        Returns:
            (value, found); found is False for missing or expired keys
        """
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a value with the default TTL."""
        ...

    def set_with_expiration(self, key: str, value: Any, ttl: float) -> None:
        """
        Store a value with an explicit TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Seconds to live; 0 uses the default, negative never expires
        """
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    def clear(self) -> None:
        """Remove every entry."""
        ...

    def count(self) -> int:
        """Number of stored entries, expired-but-unswept ones included."""
        ...

    def close(self) -> None:
        """Release background resources. Safe to call more than once."""
        ...
