"""
Pytest configuration and fixtures for registry client tests.
"""

import asyncio
import os
from collections import Counter
from typing import Callable, Dict, Generator, List, Optional
from unittest.mock import patch

import httpx
import pytest

from gem_registry.core.config import ConfigLoader
from gem_registry.domain.models import (
    PackageInformation,
    Version,
    LatestVersion,
    DependencyInfo,
    RepositoryDownloadCount,
    VersionDownloadCount,
)
from gem_registry.infrastructure.api import RetryPolicy, RubyGemsClient
from gem_registry.infrastructure.cache import MemoryCache

TEST_SERVER_URL = "https://rubygems.test"

FAST_RETRY = RetryPolicy(max_attempts=3, initial_wait=0.01, max_wait=0.05)

RAILS_PAYLOAD = {
    "name": "rails",
    "downloads": 436090160,
    "version": "7.0.5",
    "version_created_at": "2023-05-24T19:21:28.229Z",
    "version_downloads": 1234,
    "platform": "ruby",
    "authors": "David Heinemeier Hansson",
    "info": "Ruby on Rails is a full-stack web framework.",
    "licenses": ["MIT"],
    "metadata": {
        "changelog_uri": "https://github.com/rails/rails/releases/tag/v7.0.5",
        "source_code_uri": "https://github.com/rails/rails/tree/v7.0.5",
        "rubygems_mfa_required": "true",
    },
    "yanked": False,
    "sha": "abc123",
    "project_uri": "https://rubygems.org/gems/rails",
    "gem_uri": "https://rubygems.org/gems/rails-7.0.5.gem",
    "homepage_uri": "https://rubyonrails.org",
    "source_code_uri": "https://github.com/rails/rails/tree/v7.0.5",
    "dependencies": {
        "development": [],
        "runtime": [
            {"name": "actionpack", "requirements": "= 7.0.5"},
            {"name": "railties", "requirements": "= 7.0.5"},
        ],
    },
    "some_new_field": "ignored",
}

VERSIONS_PAYLOAD = [
    {
        "number": "7.0.5",
        "platform": "ruby",
        "created_at": "2023-05-24T19:21:28.229Z",
        "downloads_count": 1234,
        "prerelease": False,
        "licenses": ["MIT"],
    },
    {
        "number": "7.0.4",
        "platform": "ruby",
        "created_at": "2022-09-09T18:42:11.000Z",
        "downloads_count": 5678,
        "prerelease": False,
    },
]


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    """Forget loaded settings and restore the environment after each test."""
    ConfigLoader.reset()
    with patch.dict(os.environ, {}, clear=False):
        yield
    ConfigLoader.reset()


@pytest.fixture
def memory_cache() -> Generator[MemoryCache, None, None]:
    """Cache without a sweep thread."""
    cache = MemoryCache(default_ttl=60.0)
    yield cache
    cache.close()


class RequestLog:
    """Records requests seen by a mock transport."""

    def __init__(self):
        self.requests: List[httpx.Request] = []

    @property
    def count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_client() -> Callable[..., RubyGemsClient]:
    """
    Build a RubyGemsClient backed by httpx.MockTransport.

    The handler receives each httpx.Request; pass log= to record them.
    """
    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        log: Optional[RequestLog] = None,
        **kwargs
    ) -> RubyGemsClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            if log is not None:
                log.requests.append(request)
            return handler(request)

        kwargs.setdefault("server_url", TEST_SERVER_URL)
        kwargs.setdefault("retry_policy", FAST_RETRY)
        return RubyGemsClient(transport=httpx.MockTransport(recording_handler), **kwargs)

    return factory


class FakeRegistryClient:
    """In-memory registry client counting calls per operation."""

    def __init__(self, errors: Optional[Dict[str, Exception]] = None):
        self.calls: Counter = Counter()
        self.errors = errors or {}
        self.closed = 0
        self.cancel_events: List[Optional[asyncio.Event]] = []

    def _call(self, operation: str, cancel_event: Optional[asyncio.Event] = None) -> None:
        self.calls[operation] += 1
        self.cancel_events.append(cancel_event)
        if operation in self.errors:
            raise self.errors[operation]

    async def get_package(self, gem_name: str, cancel_event=None) -> PackageInformation:
        self._call("get_package", cancel_event)
        if gem_name in self.errors:
            raise self.errors[gem_name]
        return PackageInformation(name=gem_name, version="1.0.0")

    async def search(self, query: str, page: int = 1, cancel_event=None) -> List[PackageInformation]:
        self._call("search", cancel_event)
        return [PackageInformation(name=f"{query}-{page}")]

    async def get_versions(self, gem_name: str, cancel_event=None) -> List[Version]:
        self._call("get_versions", cancel_event)
        return [Version(number="1.0.0"), Version(number="0.9.0")]

    async def get_latest_version(self, gem_name: str, cancel_event=None) -> LatestVersion:
        self._call("get_latest_version", cancel_event)
        return LatestVersion(version="1.0.0")

    async def get_timeframe_versions(self, from_time, to_time, cancel_event=None) -> List[Version]:
        self._call("get_timeframe_versions", cancel_event)
        return [Version(number="1.0.0")]

    async def get_downloads(self, cancel_event=None) -> RepositoryDownloadCount:
        self._call("get_downloads", cancel_event)
        return RepositoryDownloadCount(total_downloads=42)

    async def get_version_downloads(
        self, gem_name: str, gem_version: str, cancel_event=None
    ) -> VersionDownloadCount:
        self._call("get_version_downloads", cancel_event)
        return VersionDownloadCount(version_downloads=1, total_downloads=2)

    async def get_dependencies(self, *gem_names: str, cancel_event=None) -> List[DependencyInfo]:
        self._call("get_dependencies", cancel_event)
        return [DependencyInfo(name=name, dependent_name="rake") for name in gem_names]

    async def get_latest_gems(self, cancel_event=None) -> List[PackageInformation]:
        self._call("get_latest_gems", cancel_event)
        return [PackageInformation(name="newest")]

    async def get_reverse_dependencies(self, gem_name: str, cancel_event=None) -> List[str]:
        self._call("get_reverse_dependencies", cancel_event)
        return ["dependent-a", "dependent-b"]

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_client() -> FakeRegistryClient:
    return FakeRegistryClient()
