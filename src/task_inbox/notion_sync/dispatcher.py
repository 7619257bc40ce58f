"""Process-wide rate-limited dispatcher for Notion API calls."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from task_inbox.logging_utils import get_logger

from .config import DEFAULT_MAX_CONCURRENT, DEFAULT_MIN_INTERVAL, DEFAULT_THROTTLE_WAIT
from .models import DispatchOutcome, Failure, Succeeded, Throttled
from .retry import classify_error

T = TypeVar("T")

logger = get_logger(__name__)


class RateLimitedDispatcher:
    """
    Serializes outbound calls against one workspace-wide rate quota.

    Calls are admitted in submission order. At most ``max_concurrent`` calls
    are in flight, and successive call starts are at least ``min_interval``
    seconds apart. Failures are never retried here; they are classified and
    returned so the retry policy can decide what to do.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        throttle_wait: float = DEFAULT_THROTTLE_WAIT,
        classify: Callable[[Exception, float], Failure] = classify_error,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            min_interval: Minimum seconds between successive call starts
            max_concurrent: Maximum number of calls in flight
            throttle_wait: Wait reported for 429s without a Retry-After header
            classify: Maps a raised exception to a failed outcome
            clock: Monotonic clock, replaceable in tests
            sleep: Awaitable sleep, replaceable in tests
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        if min_interval < 0:
            raise ValueError(f"min_interval must not be negative, got {min_interval}")

        self.min_interval = min_interval
        self.max_concurrent = max_concurrent
        self.throttle_wait = throttle_wait
        self._classify = classify
        self._clock = clock
        self._sleep = sleep

        # Only the admission lock holder waits on slots, so admission stays FIFO
        self._admission = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_concurrent)
        self._last_start: float | None = None
        self._in_flight = 0
        self._dispatched = 0

    @property
    def in_flight(self) -> int:
        """Number of calls currently running."""
        return self._in_flight

    @property
    def dispatched(self) -> int:
        """Number of calls started since creation."""
        return self._dispatched

    async def dispatch(self, call: Callable[[], Awaitable[T]]) -> DispatchOutcome:
        """
        Run a remote call once the rate limit allows it.

        Args:
            call: Zero-argument coroutine factory performing the remote call

        Returns:
            Succeeded with the call's return value, or a classified failure
        """
        call_number = await self._admit()
        try:
            value = await call()
        except Exception as e:
            outcome = self._classify(e, self.throttle_wait)
            if isinstance(outcome, Throttled):
                logger.warning(
                    f"Call #{call_number} rate limited, next attempt allowed in "
                    f"{outcome.retry_after:.2f}s"
                )
            else:
                logger.debug(
                    f"Call #{call_number} failed: {type(outcome).__name__} "
                    f"status={outcome.status}"
                )
            return outcome
        finally:
            self._in_flight -= 1
            self._slots.release()

        logger.trace(f"Call #{call_number} succeeded")  # type: ignore[attr-defined]
        return Succeeded(value)

    async def _admit(self) -> int:
        """Wait for a free slot and the spacing interval, then claim a start."""
        async with self._admission:
            await self._slots.acquire()
            try:
                if self._last_start is not None:
                    wait = self._last_start + self.min_interval - self._clock()
                    if wait > 0:
                        logger.trace(f"Spacing next call by {wait:.3f}s")  # type: ignore[attr-defined]
                        await self._sleep(wait)
            except BaseException:
                self._slots.release()
                raise

            self._last_start = self._clock()
            self._in_flight += 1
            self._dispatched += 1
            return self._dispatched


# Global dispatcher (one per process, shared by reads and writes)
_dispatcher: RateLimitedDispatcher | None = None


def get_dispatcher(
    min_interval: float = DEFAULT_MIN_INTERVAL,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
) -> RateLimitedDispatcher:
    """
    Get the process-wide dispatcher, creating it on first use.

    The arguments only apply to the first call.
    """
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = RateLimitedDispatcher(
            min_interval=min_interval, max_concurrent=max_concurrent
        )
        logger.info(
            f"Created shared dispatcher: min_interval={min_interval:.3f}s, "
            f"max_concurrent={max_concurrent}"
        )
    return _dispatcher


def reset_dispatcher() -> None:
    """Drop the process-wide dispatcher (for testing)."""
    global _dispatcher
    _dispatcher = None
