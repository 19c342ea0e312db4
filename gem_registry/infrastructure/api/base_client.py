"""
Base API Client

Base implementation for API clients: HTTP transport, error classification
and retry.
"""

import asyncio
import logging
from typing import Optional, Dict, Any
from abc import ABC, abstractmethod

import httpx

from ...core.exceptions import (
    NetworkError,
    RequestTimeoutError,
    ResponseDecodeError,
    error_from_status,
)
from .retry_handler import RetryHandler, RetryPolicy, run_cancellable

logger = logging.getLogger(__name__)

DEFAULT_RETRY_POLICY = RetryPolicy()


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class BaseAPIClient(ABC):
    """Base API client with common functionality."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = DEFAULT_RETRY_POLICY,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize base API client.

        Args:
            base_url: Base URL for API
            timeout: Request timeout in seconds
            proxy: Proxy URL for all requests
            retry_policy: Retry policy; None disables retry
            transport: Custom httpx transport
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.proxy = proxy
        self.retry_handler = RetryHandler(retry_policy) if retry_policy else None

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Enter async context."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        await self.close()

    async def initialize(self) -> None:
        """Initialize HTTP client."""
        if not self._client:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._get_default_headers(),
                proxy=self.proxy,
                transport=self._transport
            )
            logger.info(f"API client initialized for {self.base_url}")

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("API client closed")

    @abstractmethod
    def _get_default_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        pass

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        cancel_event: Optional[asyncio.Event] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request, retrying per policy.

        Args:
            method: HTTP method
            endpoint: API endpoint
            cancel_event: Abandons the request and any pending retry when set
            **kwargs: Additional request arguments

        Returns:
            HTTP response with a success status

        Raises:
            RequestCancelledError: If cancel_event fired
        """
        if not self._client:
            await self.initialize()

        if self.retry_handler is None:
            return await run_cancellable(
                lambda: self._execute_request(method, endpoint, **kwargs),
                cancel_event
            )

        return await self.retry_handler.execute(
            lambda: self._execute_request(method, endpoint, **kwargs),
            cancel_event=cancel_event
        )

    async def _execute_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> httpx.Response:
        """Execute one request and classify its failure."""
        url = endpoint if endpoint.startswith('http') else f"{self.base_url}/{endpoint.lstrip('/')}"

        logger.debug(f"{method} {url}")

        try:
            response = await self._client.request(
                method=method,
                url=url,
                **kwargs
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"request timed out: {url}",
                details={"url": url},
                original_exception=e
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"network failure: {type(e).__name__}: {e}",
                details={"url": url},
                original_exception=e
            ) from e

        if response.is_success:
            return response

        raise error_from_status(
            response.status_code,
            url=str(response.request.url),
            response_body=response.text,
            retry_after=_parse_retry_after(response)
        )

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        """Make GET request and decode the JSON body."""
        response = await self._make_request(
            "GET",
            endpoint,
            cancel_event=cancel_event,
            params=params,
            headers=headers
        )
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"invalid JSON from {response.request.url}: {e}",
                url=str(response.request.url),
                status_code=response.status_code,
                original_exception=e
            ) from e
