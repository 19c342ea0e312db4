"""
Configuration Management

Centralized configuration for the registry client.
"""

from .settings import (
    Settings,
    RegistryConfig,
    RetryConfig,
    CacheConfig,
    BulkConfig,
    DEFAULT_SERVER_URL,
)
from .loader import ConfigLoader, get_settings

__all__ = [
    "Settings",
    "RegistryConfig",
    "RetryConfig",
    "CacheConfig",
    "BulkConfig",
    "DEFAULT_SERVER_URL",
    "ConfigLoader",
    "get_settings",
]
