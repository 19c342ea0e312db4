"""
Cached Registry Client

Decorator over any registry client that serves repeated reads from a cache.
Only successful results are stored; errors always reach the caller.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Any, List, Callable, Awaitable, TypeVar
from urllib.parse import quote

from ...core.protocols import CacheProtocol, RegistryClientProtocol
from ...domain.models import (
    PackageInformation,
    Version,
    LatestVersion,
    DependencyInfo,
    RepositoryDownloadCount,
    VersionDownloadCount,
)
from ..cache import MemoryCache
from .bulk import BulkOperationsMixin
from .rubygems.client import format_rfc3339

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_CACHE_TTL = 600.0


def cache_key(operation: str, *params: Any) -> str:
    """
    Build a cache key of the form operation:param[:param...].

    Each parameter is percent-encoded, so a ":" inside a parameter can never
    be mistaken for a separator.
    """
    parts = [operation]
    parts.extend(quote(str(param), safe="") for param in params)
    return ":".join(parts)


def _instance_of(expected: type) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, expected)


def _list_of(expected: type) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, list) and all(
        isinstance(item, expected) for item in value
    )


class CachedRegistryClient(BulkOperationsMixin):
    """Caching wrapper for a registry client."""

    def __init__(
        self,
        inner: RegistryClientProtocol,
        ttl: float = DEFAULT_CACHE_TTL,
        cache: Optional[CacheProtocol] = None,
        owns_cache: Optional[bool] = None
    ):
        """
        Initialize cached client.

        Args:
            inner: Client performing the real requests
            ttl: Base TTL in seconds; some operations use a fraction of it
            cache: Cache store; defaults to a MemoryCache sweeping every 2*ttl
            owns_cache: Whether close() also closes the cache; defaults to
                True only for the cache created here
        """
        if ttl <= 0:
            ttl = DEFAULT_CACHE_TTL

        self.inner = inner
        self.ttl = ttl
        self.cache = cache if cache is not None else MemoryCache(
            default_ttl=ttl,
            sweep_interval=ttl * 2
        )
        self.owns_cache = cache is None if owns_cache is None else owns_cache
        self._closed = False

    async def __aenter__(self):
        """Enter async context."""
        if hasattr(self.inner, "initialize"):
            await self.inner.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        await self.close()

    async def _cached(
        self,
        key: str,
        ttl: float,
        is_valid: Callable[[Any], bool],
        loader: Callable[[], Awaitable[T]]
    ) -> T:
        """
        Return the cached value for key, or load, store and return it.

        Args:
            key: Cache key
            ttl: TTL for a freshly loaded value
            is_valid: Type check for the stored value; failures count as a miss
            loader: Zero-argument coroutine function calling the inner client
        """
        value, found = self.cache.get(key)
        if found:
            if is_valid(value):
                logger.debug(f"Cache hit for {key}")
                return value
            logger.debug(f"Cache entry {key} has unexpected type {type(value).__name__}")
        else:
            logger.debug(f"Cache miss for {key}")

        result = await loader()
        self.cache.set_with_expiration(key, result, ttl)
        return result

    # Gem operations
    async def get_package(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> PackageInformation:
        return await self._cached(
            cache_key("package", gem_name),
            self.ttl,
            _instance_of(PackageInformation),
            lambda: self.inner.get_package(gem_name, cancel_event=cancel_event)
        )

    async def search(
        self,
        query: str,
        page: int = 1,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        return await self._cached(
            cache_key("search", query, page),
            self.ttl / 2,
            _list_of(PackageInformation),
            lambda: self.inner.search(query, page, cancel_event=cancel_event)
        )

    # Version operations
    async def get_versions(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        return await self._cached(
            cache_key("versions", gem_name),
            self.ttl,
            _list_of(Version),
            lambda: self.inner.get_versions(gem_name, cancel_event=cancel_event)
        )

    async def get_latest_version(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> LatestVersion:
        return await self._cached(
            cache_key("latest_version", gem_name),
            self.ttl / 2,
            _instance_of(LatestVersion),
            lambda: self.inner.get_latest_version(gem_name, cancel_event=cancel_event)
        )

    async def get_timeframe_versions(
        self,
        from_time: datetime,
        to_time: datetime,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        return await self._cached(
            cache_key("timeframe_versions", format_rfc3339(from_time), format_rfc3339(to_time)),
            self.ttl,
            _list_of(Version),
            lambda: self.inner.get_timeframe_versions(from_time, to_time, cancel_event=cancel_event)
        )

    # Download operations
    async def get_downloads(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> RepositoryDownloadCount:
        return await self._cached(
            cache_key("downloads"),
            self.ttl / 2,
            _instance_of(RepositoryDownloadCount),
            lambda: self.inner.get_downloads(cancel_event=cancel_event)
        )

    async def get_version_downloads(
        self,
        gem_name: str,
        gem_version: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> VersionDownloadCount:
        return await self._cached(
            cache_key("version_downloads", gem_name, gem_version),
            self.ttl / 2,
            _instance_of(VersionDownloadCount),
            lambda: self.inner.get_version_downloads(
                gem_name, gem_version, cancel_event=cancel_event
            )
        )

    # Dependency operations
    async def get_dependencies(
        self,
        *gem_names: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[DependencyInfo]:
        """Names are keyed in call order: (a, b) and (b, a) are cached separately."""
        return await self._cached(
            cache_key("dependencies", ",".join(gem_names)),
            self.ttl,
            _list_of(DependencyInfo),
            lambda: self.inner.get_dependencies(*gem_names, cancel_event=cancel_event)
        )

    async def get_reverse_dependencies(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[str]:
        return await self._cached(
            cache_key("reverse_dependencies", gem_name),
            self.ttl,
            _list_of(str),
            lambda: self.inner.get_reverse_dependencies(gem_name, cancel_event=cancel_event)
        )

    # Activity operations
    async def get_latest_gems(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        return await self._cached(
            cache_key("latest_gems"),
            self.ttl / 4,
            _list_of(PackageInformation),
            lambda: self.inner.get_latest_gems(cancel_event=cancel_event)
        )

    # Cache management
    def clear_cache(self) -> None:
        """Drop every cached entry."""
        self.cache.clear()
        logger.info("Registry cache cleared")

    def get_cache_stats(self) -> int:
        """Number of entries currently held by the cache."""
        return self.cache.count()

    async def close(self) -> None:
        """
        Close the inner client, and the cache when this client owns it.
        Repeated calls are no-ops.
        """
        if self._closed:
            return
        self._closed = True

        if self.owns_cache:
            self.cache.close()
        await self.inner.close()
        logger.info("Cached registry client closed")
