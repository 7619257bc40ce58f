"""Failure classification and retry policy for Notion calls."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from .config import DEFAULT_RETRY_BACKOFF, DEFAULT_RETRY_JITTER, DEFAULT_THROTTLE_WAIT
from .exceptions import (
    RemoteCallError,
    TerminalClientError,
    ThrottledError,
    TransientRemoteError,
)
from .models import DispatchOutcome, Failure, Succeeded, Terminal, Throttled, Transient

T = TypeVar("T")

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 429
TERMINAL_STATUS_RANGE = range(400, 410)
TRANSIENT_STATUSES = frozenset({500, 503, 504})


def parse_retry_after(headers: Mapping[str, Any] | None, fallback: float) -> float:
    """
    Read a Retry-After header as whole seconds.

    Args:
        headers: Response headers (any mapping, case-insensitive or not)
        fallback: Wait used when the header is missing or unparsable

    Returns:
        Seconds to wait before the next attempt
    """
    if not headers:
        return fallback

    value = headers.get("retry-after")
    if value is None:
        value = headers.get("Retry-After")
    if value is None:
        return fallback

    try:
        return float(int(str(value).strip()))
    except ValueError:
        logger.warning(f"Ignoring unparsable Retry-After header: {value!r}")
        return fallback


def classify_error(error: Exception, throttle_wait: float = DEFAULT_THROTTLE_WAIT) -> Failure:
    """
    Classify a failed call.

    Rules, in order: 429 is throttled; 400-409 is terminal; everything else,
    including 500/503/504 and errors without a status, is transient.

    Args:
        error: Exception raised by the remote call
        throttle_wait: Wait used for throttling without a Retry-After header

    Returns:
        Throttled, Terminal or Transient outcome
    """
    status = getattr(error, "status", None)
    if not isinstance(status, int):
        status = None
    message = str(error) or type(error).__name__

    if status == RATE_LIMITED_STATUS:
        retry_after = parse_retry_after(getattr(error, "headers", None), throttle_wait)
        return Throttled(retry_after=retry_after, message=message, error=error)

    if status is not None and status in TERMINAL_STATUS_RANGE:
        return Terminal(status=status, message=message, error=error)

    if status is not None and status not in TRANSIENT_STATUSES:
        logger.debug(f"Treating unexpected status {status} as retryable")

    return Transient(status=status, message=message, error=error)


def failure_to_exception(failure: Failure, attempts: int) -> RemoteCallError:
    """Convert a failed outcome into the matching exception."""
    if isinstance(failure, Throttled):
        return ThrottledError(
            f"Rate limited after {attempts} attempt(s): {failure.message}",
            retry_after=failure.retry_after,
            status=failure.status,
            attempts=attempts,
        )
    if isinstance(failure, Terminal):
        return TerminalClientError(
            f"Request rejected with status {failure.status}: {failure.message}",
            status=failure.status,
            attempts=attempts,
        )
    return TransientRemoteError(
        f"Remote call failed after {attempts} attempt(s): {failure.message}",
        status=failure.status,
        attempts=attempts,
    )


async def with_retry(
    fn: Callable[[], Awaitable[DispatchOutcome]],
    max_attempts: int,
    *,
    backoff: float = DEFAULT_RETRY_BACKOFF,
    jitter: float = DEFAULT_RETRY_JITTER,
    label: str = "notion call",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """
    Run a dispatched call until it succeeds or the attempts run out.

    Terminal failures are raised at once. Throttled failures wait for their
    Retry-After hint, other retryable failures wait ``backoff`` seconds plus
    up to ``jitter * backoff`` of random jitter.

    Args:
        fn: Zero-argument coroutine factory returning a DispatchOutcome
        max_attempts: Total attempts, including the first one
        backoff: Fixed delay between non-throttled attempts, in seconds
        jitter: Fraction of the backoff added at random
        label: Description used in log messages
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        The value carried by the successful outcome

    Raises:
        RemoteCallError: Terminal failure, or the last failure once
            max_attempts is exhausted
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    attempt = 0
    while True:
        attempt += 1
        outcome = await fn()

        if isinstance(outcome, Succeeded):
            return outcome.value

        if isinstance(outcome, Terminal):
            logger.error(f"{label} failed with status {outcome.status}, not retrying")
            raise failure_to_exception(outcome, attempt) from outcome.error

        if attempt >= max_attempts:
            logger.error(f"{label} failed after {attempt}/{max_attempts} attempts")
            raise failure_to_exception(outcome, attempt) from outcome.error

        if isinstance(outcome, Throttled):
            delay = outcome.retry_after
        else:
            delay = backoff + random.uniform(0, backoff * jitter)  # noqa: S311

        logger.warning(
            f"Attempt {attempt}/{max_attempts} of {label} failed "
            f"({type(outcome).__name__}, status={outcome.status}): {outcome.message}. "
            f"Retrying in {delay:.2f}s"
        )
        await sleep(delay)
