"""
Core Protocol Definitions

This module defines the interfaces that all implementations must follow.
"""

from .cache_protocol import CacheProtocol
from .registry_client_protocol import RegistryClientProtocol

__all__ = [
    "CacheProtocol",
    "RegistryClientProtocol",
]
