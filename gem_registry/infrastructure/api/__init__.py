"""
API Infrastructure

Registry API clients, retry and bulk execution.
"""

from .base_client import BaseAPIClient, DEFAULT_RETRY_POLICY
from .retry_handler import (
    RetryHandler,
    RetryPolicy,
    RETRYABLE_STATUS_CODES,
    default_should_retry,
    with_retry,
)
from .bulk import BulkExecutor, BulkOptions, BulkResult, BulkOperationsMixin
from .rubygems import RubyGemsClient, MIRRORS, create_mirror_client
from .cached_client import CachedRegistryClient, cache_key

__all__ = [
    # Base client
    "BaseAPIClient",
    "DEFAULT_RETRY_POLICY",

    # Retry
    "RetryHandler",
    "RetryPolicy",
    "RETRYABLE_STATUS_CODES",
    "default_should_retry",
    "with_retry",

    # Bulk
    "BulkExecutor",
    "BulkOptions",
    "BulkResult",
    "BulkOperationsMixin",

    # RubyGems API
    "RubyGemsClient",
    "MIRRORS",
    "create_mirror_client",

    # Caching
    "CachedRegistryClient",
    "cache_key",
]
