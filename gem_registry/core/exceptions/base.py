"""
Base Exception Classes

Core exception hierarchy for the registry client.
"""

from typing import Optional, Dict, Any


class RegistryError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class InvalidRequestError(RegistryError):
    """Malformed request parameters, rejected before anything is sent."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value

        self.details["field"] = field
        self.details["value"] = value


class APIError(RegistryError):
    """The registry answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        response_body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url
        self.response_body = response_body

        self.details["status_code"] = status_code
        self.details["url"] = url

    def __str__(self) -> str:
        return f"API error (status: {self.status_code}, url: {self.url}): {self.message}"


class NotFoundError(APIError):
    """Resource not found (404)."""


class UnauthorizedError(APIError):
    """Missing or rejected credentials (401)."""


class RateLimitedError(APIError):
    """Rate limit exceeded (429)."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class ServerError(APIError):
    """Registry-side failure (5xx)."""


class NetworkError(RegistryError):
    """No response was obtained from the registry."""


class RequestTimeoutError(RegistryError):
    """The request did not complete within its timeout."""


class RequestCancelledError(RegistryError):
    """The caller cancelled the request."""


class ResponseDecodeError(RegistryError):
    """Response body could not be decoded into the expected type."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        super().__init__(message, details, original_exception)
        self.url = url
        self.status_code = status_code

        self.details["url"] = url


class RetriesExhaustedError(RegistryError):
    """Every attempt allowed by the retry policy failed."""

    def __init__(
        self,
        attempts: int,
        last_error: BaseException,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f"max retry attempts reached ({attempts}): {last_error}"
        super().__init__(message, details, original_exception=last_error)
        self.attempts = attempts
        self.last_error = last_error

        self.details["attempts"] = attempts
        self.details["last_error"] = type(last_error).__name__


class ConfigurationError(RegistryError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.config_key = config_key

        self.details["config_key"] = config_key


def _unwrap(error: BaseException) -> BaseException:
    """Follow RetriesExhaustedError down to the failure it wraps."""
    while isinstance(error, RetriesExhaustedError):
        error = error.last_error
    return error


def is_not_found(error: BaseException) -> bool:
    """Check whether the error means the resource does not exist."""
    return isinstance(_unwrap(error), NotFoundError)


def is_rate_limited(error: BaseException) -> bool:
    """Check whether the error is a rate limit rejection."""
    return isinstance(_unwrap(error), RateLimitedError)


def is_unauthorized(error: BaseException) -> bool:
    """Check whether the error is an authentication failure."""
    return isinstance(_unwrap(error), UnauthorizedError)


def error_from_status(
    status_code: int,
    url: Optional[str] = None,
    response_body: Optional[str] = None,
    retry_after: Optional[float] = None
) -> APIError:
    """
    Build the classified error for an HTTP status.

    Args:
        status_code: HTTP status code of the response
        url: Request URL
        response_body: Raw response text
        retry_after: Parsed Retry-After header, if any

    Returns:
        APIError subclass matching the status
    """
    kwargs = {"status_code": status_code, "url": url, "response_body": response_body}

    if status_code == 404:
        return NotFoundError("resource not found", **kwargs)
    if status_code == 401:
        return UnauthorizedError("unauthorized", **kwargs)
    if status_code == 429:
        return RateLimitedError("request rate limited", retry_after=retry_after, **kwargs)
    if 500 <= status_code < 600:
        return ServerError("server error", **kwargs)
    return APIError(f"unexpected status {status_code}", **kwargs)
