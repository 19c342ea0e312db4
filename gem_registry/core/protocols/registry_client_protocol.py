"""
Registry Client Protocol Definition

Defines the operations every registry client (plain or decorated) offers.
"""

import asyncio
from datetime import datetime
from typing import Protocol, List, Optional, runtime_checkable

from ...domain.models import (
    PackageInformation,
    Version,
    LatestVersion,
    DependencyInfo,
    RepositoryDownloadCount,
    VersionDownloadCount,
)


@runtime_checkable
class RegistryClientProtocol(Protocol):
    """
    Protocol for registry client implementations.

    Every operation takes an optional cancel_event; once it is set, pending
    requests and retry waits abort with RequestCancelledError.
    """

    async def get_package(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> PackageInformation:
        """
        Get gem information.

        Raises:
            NotFoundError: If the gem does not exist
        """
        ...

    async def search(
        self,
        query: str,
        page: int = 1,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        """Search gems; an empty list means the last page was passed."""
        ...

    async def get_versions(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        """Get every version of a gem, newest first."""
        ...

    async def get_latest_version(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> LatestVersion:
        """Get the latest version of a gem."""
        ...

    async def get_timeframe_versions(
        self,
        from_time: datetime,
        to_time: datetime,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[Version]:
        """Get versions released inside a time window."""
        ...

    async def get_downloads(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> RepositoryDownloadCount:
        """Get total downloads of the registry."""
        ...

    async def get_version_downloads(
        self,
        gem_name: str,
        gem_version: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> VersionDownloadCount:
        """Get downloads of one gem version."""
        ...

    async def get_dependencies(
        self,
        *gem_names: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[DependencyInfo]:
        """Get dependencies of gems; unknown gems yield an empty list."""
        ...

    async def get_latest_gems(
        self,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[PackageInformation]:
        """Get the most recently published gems."""
        ...

    async def get_reverse_dependencies(
        self,
        gem_name: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[str]:
        """Get gems depending on a gem; unknown gems yield an empty list."""
        ...

    async def close(self) -> None:
        """Release client resources."""
        ...
