"""
Bulk Operations

Concurrent fetching of many gems through a bounded pool of worker tasks.
Results are written into one slot per input key, so output order equals
input order.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import (
    TypeVar,
    Generic,
    Optional,
    List,
    Sequence,
    Callable,
    Awaitable,
)

from ...core.config import BulkConfig
from ...domain.models import PackageInformation, Version, DependencyInfo

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_CONCURRENCY = 10


@dataclass
class BulkOptions:
    """Options for bulk operations."""
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    continue_on_error: bool = True

    @classmethod
    def from_config(cls, config: BulkConfig) -> "BulkOptions":
        return cls(
            max_concurrency=config.max_concurrency,
            continue_on_error=config.continue_on_error
        )


@dataclass
class BulkResult(Generic[T]):
    """Outcome of one key in a bulk operation."""
    key: str
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BulkExecutor:
    """
    Worker-pool executor.

    min(max_concurrency, len(keys)) workers pull indices from a shared queue and
    run the per-key operation one at a time. Failures are kept in the result of
    the key that produced them.
    """

    def __init__(self, options: Optional[BulkOptions] = None):
        self.options = options or BulkOptions()

    def worker_count(self, key_count: int) -> int:
        """Number of workers spawned for key_count keys."""
        if key_count <= 0:
            return 0

        max_concurrency = self.options.max_concurrency
        if max_concurrency <= 0:
            logger.warning(f"Invalid max_concurrency {max_concurrency}, using 1")
            max_concurrency = 1

        return min(max_concurrency, key_count)

    async def run(
        self,
        keys: Sequence[str],
        operation: Callable[[str], Awaitable[T]],
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[BulkResult[T]]:
        """
        Run operation for every key.

        Args:
            keys: Keys to process
            operation: Coroutine function fetching one key
            cancel_event: Stops dispatch of new keys when set. In-flight
                operations see it only if operation observes it itself

        Returns:
            Results in input order. With continue_on_error=False, or once
            cancel_event fires, keys never dispatched are left out.
        """
        keys = list(keys)
        if not keys:
            return []

        slots: List[Optional[BulkResult[T]]] = [None] * len(keys)
        stop_dispatch = asyncio.Event()

        queue: asyncio.Queue = asyncio.Queue()
        for index in range(len(keys)):
            queue.put_nowait(index)

        def dispatch_stopped() -> bool:
            return stop_dispatch.is_set() or (
                cancel_event is not None and cancel_event.is_set()
            )

        async def worker() -> None:
            while not dispatch_stopped():
                try:
                    index = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return

                key = keys[index]
                try:
                    value = await operation(key)
                    slots[index] = BulkResult(key=key, value=value)
                except Exception as e:
                    logger.debug(f"Bulk item {key!r} failed: {type(e).__name__}: {e}")
                    slots[index] = BulkResult(key=key, error=e)
                    if not self.options.continue_on_error:
                        stop_dispatch.set()

        workers = self.worker_count(len(keys))
        logger.debug(f"Bulk run: {len(keys)} keys, {workers} workers")

        await asyncio.gather(*(worker() for _ in range(workers)))

        results = [result for result in slots if result is not None]
        if len(results) < len(keys):
            logger.info(f"Bulk run stopped early: {len(results)}/{len(keys)} keys processed")

        return results


class BulkOperationsMixin:
    """
    Bulk variants of the single-item client operations.

    Mixed into any class providing get_package, get_versions, get_dependencies
    and get_reverse_dependencies, so they run through that class's own
    (possibly cached) single-item path. The cancel event is handed to every
    single-item call, so in-flight requests and retry waits abort with
    RequestCancelledError once it fires.
    """

    async def bulk_get_packages(
        self,
        gem_names: Sequence[str],
        options: Optional[BulkOptions] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[BulkResult[PackageInformation]]:
        """Fetch information for many gems concurrently."""
        return await BulkExecutor(options).run(
            gem_names,
            partial(self.get_package, cancel_event=cancel_event),
            cancel_event
        )

    async def bulk_get_versions(
        self,
        gem_names: Sequence[str],
        options: Optional[BulkOptions] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[BulkResult[List[Version]]]:
        """Fetch version lists for many gems concurrently."""
        return await BulkExecutor(options).run(
            gem_names,
            partial(self.get_versions, cancel_event=cancel_event),
            cancel_event
        )

    async def bulk_get_dependencies(
        self,
        gem_names: Sequence[str],
        options: Optional[BulkOptions] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[BulkResult[List[DependencyInfo]]]:
        """Fetch dependencies for many gems concurrently, one request per gem."""
        return await BulkExecutor(options).run(
            gem_names,
            partial(self.get_dependencies, cancel_event=cancel_event),
            cancel_event
        )

    async def bulk_get_reverse_dependencies(
        self,
        gem_names: Sequence[str],
        options: Optional[BulkOptions] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[BulkResult[List[str]]]:
        """Fetch reverse dependencies for many gems concurrently."""
        return await BulkExecutor(options).run(
            gem_names,
            partial(self.get_reverse_dependencies, cancel_event=cancel_event),
            cancel_event
        )
