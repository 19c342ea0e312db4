"""
Core Exceptions

Exception hierarchy for the registry client.
"""

from .base import (
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
    error_from_status,
    is_not_found,
    is_rate_limited,
    is_unauthorized,
)

__all__ = [
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
    "error_from_status",
    "is_not_found",
    "is_rate_limited",
    "is_unauthorized",
]
