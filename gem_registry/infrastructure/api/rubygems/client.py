"""
RubyGems API Client

Typed access to the RubyGems.org v1 API (and compatible mirrors).
See https://guides.rubygems.org/rubygems-org-api/
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Type, TypeVar, AsyncIterator
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from ....core.config import Settings, DEFAULT_SERVER_URL
from ....core.exceptions import (
    InvalidRequestError,
    ResponseDecodeError,
    is_not_found,
)
from ....domain.models import (
    PackageInformation,
    Version,
    LatestVersion,
    DependencyInfo,
    RepositoryDownloadCount,
    VersionDownloadCount,
)
from ..base_client import BaseAPIClient, DEFAULT_RETRY_POLICY
from ..bulk import BulkOperationsMixin
from ..retry_handler import RetryPolicy
from .mirrors import resolve_server_url

logger = logging.getLogger(__name__)

T = TypeVar('T')

USER_AGENT = "gem-registry/1.0"


def _path_segment(value: str) -> str:
    return quote(value, safe="")


def _require_name(value: str, field: str = "gem_name") -> str:
    if not value or not value.strip():
        raise InvalidRequestError(f"{field} must not be empty", field=field, value=value)
    return value.strip()


def format_rfc3339(value: datetime) -> str:
    """Format a datetime as RFC 3339 UTC; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class RubyGemsClient(BulkOperationsMixin, BaseAPIClient):
    """RubyGems registry client."""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        token: Optional[str] = None,
        proxy: Optional[str] = None,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = DEFAULT_RETRY_POLICY,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize RubyGems client.

        Args:
            server_url: Registry base URL (official server or a mirror)
            token: API token sent as bearer Authorization header
            proxy: Proxy URL for all requests
            timeout: Request timeout in seconds
            retry_policy: Retry policy; None disables retry
            transport: Custom httpx transport
        """
        super().__init__(
            base_url=server_url,
            timeout=timeout,
            proxy=proxy,
            retry_policy=retry_policy,
            transport=transport
        )
        self.token = token

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "RubyGemsClient":
        """Create a client from application settings."""
        registry = settings.registry
        return cls(
            server_url=resolve_server_url(registry.mirror, registry.server_url),
            token=registry.token,
            proxy=registry.proxy,
            timeout=registry.timeout,
            retry_policy=RetryPolicy.from_config(settings.retry),
            transport=transport
        )

    def _get_default_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get_model(
        self,
        endpoint: str,
        model: Type[T],
        params: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> T:
        """GET an endpoint and decode the body into model."""
        data = await self.get(endpoint, params=params, cancel_event=cancel_event)
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as e:
            raise ResponseDecodeError(
                f"unexpected payload from {endpoint}: {e.error_count()} validation errors",
                url=f"{self.base_url}{endpoint}",
                original_exception=e
            ) from e

    # Gem endpoints
    async def get_package(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> PackageInformation:
        """
        Get gem information.

        GET /api/v1/gems/[GEM NAME].json
        """
        gem_name = _require_name(gem_name)
        endpoint = f"/api/v1/gems/{_path_segment(gem_name)}.json"
        return await self._get_model(endpoint, PackageInformation, cancel_event=cancel_event)

    async def search(
        self,
        query: str,
        page: int = 1,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        """
        Search gems. An empty list means the page is past the last one.

        GET /api/v1/search.json?query=[QUERY]&page=[PAGE]
        """
        query = _require_name(query, field="query")
        if page <= 0:
            page = 1
        return await self._get_model(
            "/api/v1/search.json",
            List[PackageInformation],
            params={"query": query, "page": page},
            cancel_event=cancel_event
        )

    async def search_all(
        self,
        query: str,
        max_pages: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[PackageInformation]:
        """
        Iterate over every search result, page by page.

        Args:
            query: Search query
            max_pages: Maximum pages to fetch
            cancel_event: Stops the iteration with RequestCancelledError when set

        Yields:
            Matching gems
        """
        page = 1
        while True:
            if max_pages and page > max_pages:
                break

            items = await self.search(query, page, cancel_event=cancel_event)
            if not items:
                break

            for item in items:
                yield item

            page += 1

    # Version endpoints
    async def get_versions(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        """
        Get every version of a gem, newest first.

        GET /api/v1/versions/[GEM NAME].json
        """
        gem_name = _require_name(gem_name)
        endpoint = f"/api/v1/versions/{_path_segment(gem_name)}.json"
        return await self._get_model(endpoint, List[Version], cancel_event=cancel_event)

    async def get_latest_version(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> LatestVersion:
        """
        Get the latest version of a gem.

        GET /api/v1/versions/[GEM NAME]/latest.json
        """
        gem_name = _require_name(gem_name)
        endpoint = f"/api/v1/versions/{_path_segment(gem_name)}/latest.json"
        return await self._get_model(endpoint, LatestVersion, cancel_event=cancel_event)

    async def get_timeframe_versions(
        self,
        from_time: datetime,
        to_time: datetime,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        """
        Get versions created inside a time window.

        GET /api/v1/timeframe_versions.json?from=[RFC3339]&to=[RFC3339]
        """
        if from_time > to_time:
            raise InvalidRequestError(
                "from_time must not be after to_time",
                field="from_time",
                value=from_time.isoformat()
            )
        return await self._get_model(
            "/api/v1/timeframe_versions.json",
            List[Version],
            params={"from": format_rfc3339(from_time), "to": format_rfc3339(to_time)},
            cancel_event=cancel_event
        )

    # Download endpoints
    async def get_downloads(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> RepositoryDownloadCount:
        """
        Get total downloads of every gem in the registry.

        GET /api/v1/downloads.json
        """
        return await self._get_model(
            "/api/v1/downloads.json",
            RepositoryDownloadCount,
            cancel_event=cancel_event
        )

    async def get_version_downloads(
        self,
        gem_name: str,
        gem_version: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> VersionDownloadCount:
        """
        Get downloads of one gem version.

        GET /api/v1/downloads/[GEM NAME]-[GEM VERSION].json
        """
        gem_name = _require_name(gem_name)
        gem_version = _require_name(gem_version, field="gem_version")
        endpoint = f"/api/v1/downloads/{_path_segment(gem_name)}-{_path_segment(gem_version)}.json"
        return await self._get_model(endpoint, VersionDownloadCount, cancel_event=cancel_event)

    # Dependency endpoints
    async def get_dependencies(
        self,
        *gem_names: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[DependencyInfo]:
        """
        Get dependencies of one or more gems. Unknown gems give an empty list.

        GET /api/v1/dependencies.json?gems=[COMMA DELIMITED GEM NAMES]
        """
        if not gem_names:
            raise InvalidRequestError("at least one gem name is required", field="gem_names")
        names = [_require_name(name) for name in gem_names]

        try:
            return await self._get_model(
                "/api/v1/dependencies.json",
                List[DependencyInfo],
                params={"gems": ",".join(names)},
                cancel_event=cancel_event
            )
        except Exception as e:
            if is_not_found(e):
                logger.debug(f"No dependencies for {names}: not found")
                return []
            raise

    async def get_reverse_dependencies(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[str]:
        """
        Get names of gems depending on a gem. Unknown gems give an empty list.

        GET /api/v1/gems/[GEM NAME]/reverse_dependencies.json
        """
        gem_name = _require_name(gem_name)
        endpoint = f"/api/v1/gems/{_path_segment(gem_name)}/reverse_dependencies.json"

        try:
            return await self._get_model(endpoint, List[str], cancel_event=cancel_event)
        except Exception as e:
            if is_not_found(e):
                logger.debug(f"No reverse dependencies for {gem_name}: not found")
                return []
            raise

    # Activity endpoints
    async def get_latest_gems(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        """
        Get the 50 most recently added gems.

        GET /api/v1/activity/latest.json
        """
        return await self._get_model(
            "/api/v1/activity/latest.json",
            List[PackageInformation],
            cancel_event=cancel_event
        )
