"""
Dependency Injection Container

Central container for managing client dependencies.
"""

import logging
from typing import Optional, Union

import httpx
from dependency_injector import containers, providers

from .config import Settings, ConfigLoader
from ..infrastructure.api import RubyGemsClient, CachedRegistryClient
from ..infrastructure.cache import MemoryCache

logger = logging.getLogger(__name__)


class Container(containers.DeclarativeContainer):
    """Main DI container."""

    # Load settings
    settings = providers.Singleton(
        ConfigLoader.load_config
    )

    # Infrastructure - Cache
    cache = providers.Singleton(
        MemoryCache,
        default_ttl=settings.provided.cache.ttl,
        sweep_interval=settings.provided.cache.sweep_interval
    )

    # Infrastructure - RubyGems API client
    registry_client = providers.Factory(
        RubyGemsClient.from_settings,
        settings=settings
    )

    # Infrastructure - cached decorator over the API client
    cached_client = providers.Factory(
        CachedRegistryClient,
        inner=registry_client,
        ttl=settings.provided.cache.ttl,
        cache=cache
    )


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def create_client(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Union[RubyGemsClient, CachedRegistryClient]:
    """
    Build a registry client from settings.

    Args:
        settings: Settings to use; defaults to the loaded configuration
        transport: Custom httpx transport for the underlying client

    Returns:
        CachedRegistryClient when caching is enabled, otherwise RubyGemsClient
    """
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))

    settings = container.settings()
    inner = container.registry_client(transport=transport)

    if not settings.cache.enabled:
        logger.debug("Cache disabled, using plain registry client")
        return inner

    # the container is private to this client, so its cache is too
    return container.cached_client(inner=inner, owns_cache=True)
