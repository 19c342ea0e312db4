"""
Registry API Retry Handler

Retries failed requests with bounded attempts and (exponential) backoff.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import wraps
from typing import TypeVar, Callable, Optional, Awaitable, FrozenSet

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
)

from ...core.config import RetryConfig
from ...core.exceptions import (
    APIError,
    ConfigurationError,
    InvalidRequestError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseDecodeError,
    RetriesExhaustedError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_WAIT = 1.0
DEFAULT_RETRY_MAX_WAIT = 30.0

RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})

# Never retried, whatever the policy says
TERMINAL_ERRORS = (
    InvalidRequestError,
    RequestTimeoutError,
    RequestCancelledError,
    asyncio.TimeoutError,
)


def default_should_retry(status: Optional[int], error: Optional[BaseException]) -> bool:
    """
    Default retry decision.

    Args:
        status: HTTP status of the failed attempt, None if no response arrived
        error: Exception raised by the attempt

    Returns:
        True for network failures and for 429/500/502/503/504
    """
    if status is None:
        return isinstance(error, NetworkError)
    return status in RETRYABLE_STATUS_CODES


def response_status(error: BaseException) -> Optional[int]:
    """HTTP status carried by an error, if a response was received."""
    if isinstance(error, (APIError, ResponseDecodeError)):
        return error.status_code
    return None


async def run_cancellable(
    attempt: Callable[[], Awaitable[T]],
    cancel_event: Optional[asyncio.Event] = None
) -> T:
    """
    Await one attempt, abandoning it as soon as cancel_event fires.

    Raises:
        RequestCancelledError: If cancel_event is set before or during the attempt
    """
    if cancel_event is None:
        return await attempt()

    if cancel_event.is_set():
        raise RequestCancelledError("request cancelled")

    request = asyncio.ensure_future(attempt())
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({request, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        request.cancel()
        raise
    finally:
        cancelled.cancel()

    if request.done():
        return request.result()

    request.cancel()
    await asyncio.gather(request, return_exceptions=True)
    raise RequestCancelledError("request cancelled while in flight")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration; immutable once built."""
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS
    initial_wait: float = DEFAULT_RETRY_WAIT
    max_wait: float = DEFAULT_RETRY_MAX_WAIT
    use_exponential_backoff: bool = True
    should_retry: Callable[[Optional[int], Optional[BaseException]], bool] = default_should_retry

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be >= 1, got {self.max_attempts}",
                config_key="max_attempts"
            )
        if self.initial_wait < 0 or self.max_wait < 0:
            raise ConfigurationError("retry waits must not be negative")

    @classmethod
    def from_config(cls, config: RetryConfig) -> Optional["RetryPolicy"]:
        """Build a policy from settings; None when retry is disabled."""
        if not config.enabled:
            return None
        return cls(
            max_attempts=config.max_attempts,
            initial_wait=config.initial_wait,
            max_wait=config.max_wait,
            use_exponential_backoff=config.exponential_backoff
        )


class RetryHandler:
    """
    Retry handler for registry requests.

    Attempt 1 runs at once. Attempt k > 1 waits initial_wait, doubled for each
    earlier retry when exponential backoff is on, capped at max_wait.
    """

    def __init__(self, policy: Optional[RetryPolicy] = None):
        """
        Initialize retry handler.

        Args:
            policy: Retry policy, defaults to RetryPolicy()
        """
        self.policy = policy or RetryPolicy()

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate the wait before an attempt.

        Args:
            attempt: Attempt number (1-based)

        Returns:
            Delay in seconds
        """
        if attempt <= 1:
            return 0.0

        if not self.policy.use_exponential_backoff:
            return self.policy.initial_wait

        delay = self.policy.initial_wait * (2 ** (attempt - 2))
        return min(delay, self.policy.max_wait)

    def should_retry(self, exception: BaseException) -> bool:
        """
        Determine if a failed attempt should be retried.

        Args:
            exception: Exception raised by the attempt

        Returns:
            True if the policy allows another attempt
        """
        if not isinstance(exception, Exception):
            return False

        if isinstance(exception, TERMINAL_ERRORS):
            return False

        return self.policy.should_retry(response_status(exception), exception)

    async def execute(
        self,
        attempt: Callable[[], Awaitable[T]],
        cancel_event: Optional[asyncio.Event] = None
    ) -> T:
        """
        Run an attempt with retry logic.

        Args:
            attempt: Zero-argument coroutine function performing one request
            cancel_event: Aborts the sequence when set, including a running attempt

        Returns:
            Result of the first successful attempt

        Raises:
            RetriesExhaustedError: If every allowed attempt failed retryably
            RequestCancelledError: If cancel_event fired
            Exception: The first non-retryable failure, unchanged
        """
        async def guarded_attempt() -> T:
            return await run_cancellable(attempt, cancel_event)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(self.should_retry),
            sleep=self._make_sleep(cancel_event),
            before_sleep=self._log_retry,
        )

        try:
            return await retrying(guarded_attempt)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.warning(
                f"Request failed after {e.last_attempt.attempt_number} attempts: "
                f"{type(last_error).__name__}: {last_error}"
            )
            raise RetriesExhaustedError(
                attempts=e.last_attempt.attempt_number,
                last_error=last_error
            ) from last_error

    def _wait(self, retry_state: RetryCallState) -> float:
        # attempt_number is the attempt that just failed
        return self.calculate_delay(retry_state.attempt_number + 1)

    def _make_sleep(
        self,
        cancel_event: Optional[asyncio.Event]
    ) -> Callable[[float], Awaitable[None]]:
        async def sleep(delay: float) -> None:
            if cancel_event is None:
                await asyncio.sleep(delay)
                return

            if cancel_event.is_set():
                raise RequestCancelledError("request cancelled while waiting to retry")

            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                return

            raise RequestCancelledError("request cancelled while waiting to retry")

        return sleep

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Request failed (attempt {retry_state.attempt_number}/{self.policy.max_attempts}): "
            f"{type(error).__name__}: {error}. Retrying in {delay:.2f}s..."
        )


def with_retry(policy: Optional[RetryPolicy] = None):
    """
    Decorator for adding retry logic to async functions.

    Args:
        policy: Retry policy, defaults to RetryPolicy()
    """
    def decorator(func):
        handler = RetryHandler(policy)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await handler.execute(lambda: func(*args, **kwargs))

        return wrapper

    return decorator
