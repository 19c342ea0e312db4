"""
Gem Registry

Async client for the RubyGems registry API with caching, retry and bulk
fetching.
"""

from .core.config import Settings, ConfigLoader, get_settings
from .core.exceptions import (
    RegistryError,
    InvalidRequestError,
    APIError,
    NotFoundError,
    UnauthorizedError,
    RateLimitedError,
    ServerError,
    NetworkError,
    RequestTimeoutError,
    RequestCancelledError,
    ResponseDecodeError,
    RetriesExhaustedError,
    ConfigurationError,
    is_not_found,
    is_rate_limited,
    is_unauthorized,
)
from .infrastructure.api import (
    RubyGemsClient,
    CachedRegistryClient,
    RetryPolicy,
    RetryHandler,
    BulkExecutor,
    BulkOptions,
    BulkResult,
    MIRRORS,
    create_mirror_client,
)
from .infrastructure.cache import MemoryCache

__version__ = "1.0.0"

__all__ = [
    "__version__",

    # Configuration
    "Settings",
    "ConfigLoader",
    "get_settings",

    # Clients
    "RubyGemsClient",
    "CachedRegistryClient",
    "MIRRORS",
    "create_mirror_client",

    # Building blocks
    "MemoryCache",
    "RetryPolicy",
    "RetryHandler",
    "BulkExecutor",
    "BulkOptions",
    "BulkResult",

    # Errors
    "RegistryError",
    "InvalidRequestError",
    "APIError",
    "NotFoundError",
    "UnauthorizedError",
    "RateLimitedError",
    "ServerError",
    "NetworkError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "RetriesExhaustedError",
    "ConfigurationError",
    "is_not_found",
    "is_rate_limited",
    "is_unauthorized",
]
