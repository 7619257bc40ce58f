"""Tests for failure classification and the retry policy."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from task_inbox.notion_sync.dispatcher import RateLimitedDispatcher
from task_inbox.notion_sync.exceptions import (
    RemoteCallError,
    TerminalClientError,
    ThrottledError,
    TransientRemoteError,
)
from task_inbox.notion_sync.models import Succeeded, Terminal, Throttled, Transient
from task_inbox.notion_sync.retry import classify_error, parse_retry_after, with_retry


@pytest.mark.unit
class TestClassification:
    """Test classify_error rules."""

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409])
    def test_client_errors_are_terminal(self, api_error: Any, status: int) -> None:
        """Test that 400-409 are terminal."""
        outcome = classify_error(api_error(status))

        assert isinstance(outcome, Terminal)
        assert outcome.status == status

    @pytest.mark.parametrize("status", [500, 503, 504])
    def test_server_faults_are_transient(self, api_error: Any, status: int) -> None:
        """Test that 500, 503 and 504 are retryable."""
        assert isinstance(classify_error(api_error(status)), Transient)

    @pytest.mark.parametrize("status", [410, 418, 502])
    def test_other_statuses_default_to_retryable(self, api_error: Any, status: int) -> None:
        """Test that unlisted statuses are retryable."""
        assert isinstance(classify_error(api_error(status)), Transient)

    def test_errors_without_status_are_retryable(self) -> None:
        """Test that network-level errors are retryable."""
        outcome = classify_error(ConnectionError("reset by peer"))

        assert isinstance(outcome, Transient)
        assert outcome.status is None
        assert "reset by peer" in outcome.message

    def test_rate_limit_is_throttled(self, api_error: Any) -> None:
        """Test that 429 carries the Retry-After wait."""
        outcome = classify_error(api_error(429, {"Retry-After": "3"}))

        assert isinstance(outcome, Throttled)
        assert outcome.retry_after == 3.0


@pytest.mark.unit
class TestRetryAfterParsing:
    """Test Retry-After header parsing."""

    def test_integer_seconds(self) -> None:
        assert parse_retry_after({"retry-after": "5"}, 0.4) == 5.0

    def test_missing_header_uses_fallback(self) -> None:
        assert parse_retry_after({}, 0.4) == 0.4
        assert parse_retry_after(None, 0.4) == 0.4

    def test_unparsable_header_uses_fallback(self) -> None:
        assert parse_retry_after({"retry-after": "soon"}, 0.4) == 0.4


@pytest.mark.unit
@pytest.mark.asyncio
class TestWithRetry:
    """Test the retry loop."""

    async def test_success_on_first_attempt(self) -> None:
        """Test that a successful outcome is unwrapped."""
        fn = AsyncMock(return_value=Succeeded("done"))
        sleep = AsyncMock()

        assert await with_retry(fn, 3, sleep=sleep) == "done"
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_terminal_failure_is_not_retried(
        self, dispatcher: RateLimitedDispatcher, api_error: Any
    ) -> None:
        """Test that a 404 results in a single attempt."""
        call = AsyncMock(side_effect=api_error(404))
        sleep = AsyncMock()

        with pytest.raises(TerminalClientError) as exc_info:
            await with_retry(lambda: dispatcher.dispatch(call), 3, sleep=sleep)

        assert exc_info.value.status == 404
        assert exc_info.value.attempts == 1
        assert call.await_count == 1
        sleep.assert_not_awaited()

    async def test_transient_failures_then_success(
        self, dispatcher: RateLimitedDispatcher, api_error: Any
    ) -> None:
        """Test that two 503s followed by a success take exactly three attempts."""
        call = AsyncMock(side_effect=[api_error(503), api_error(503), {"id": "p1"}])

        result = await with_retry(
            lambda: dispatcher.dispatch(call), 3, sleep=AsyncMock()
        )

        assert result == {"id": "p1"}
        assert call.await_count == 3
        assert dispatcher.dispatched == 3

    async def test_exhausted_attempts_raise_last_failure(
        self, dispatcher: RateLimitedDispatcher, api_error: Any
    ) -> None:
        """Test that running out of attempts raises the last failure."""
        call = AsyncMock(side_effect=api_error(503))

        with pytest.raises(TransientRemoteError) as exc_info:
            await with_retry(lambda: dispatcher.dispatch(call), 2, sleep=AsyncMock())

        assert exc_info.value.attempts == 2
        assert exc_info.value.status == 503
        assert isinstance(exc_info.value, RemoteCallError)
        assert call.await_count == 2

    async def test_throttled_attempt_waits_retry_after(self) -> None:
        """Test that a throttled failure sleeps for its Retry-After hint."""
        fn = AsyncMock(side_effect=[Throttled(retry_after=2.0), Succeeded("ok")])
        sleep = AsyncMock()

        assert await with_retry(fn, 3, sleep=sleep) == "ok"
        sleep.assert_awaited_once_with(2.0)

    async def test_persistent_throttling_raises_throttled_error(self) -> None:
        """Test that throttling on every attempt surfaces ThrottledError."""
        fn = AsyncMock(return_value=Throttled(retry_after=1.0))

        with pytest.raises(ThrottledError) as exc_info:
            await with_retry(fn, 2, sleep=AsyncMock())

        assert exc_info.value.retry_after == 1.0
        assert exc_info.value.status == 429

    async def test_transient_backoff_includes_bounded_jitter(self) -> None:
        """Test the delay between non-throttled attempts."""
        fn = AsyncMock(side_effect=[Transient(status=500), Succeeded("ok")])
        sleep = AsyncMock()

        await with_retry(fn, 2, backoff=0.5, jitter=0.1, sleep=sleep)

        delay = sleep.await_args.args[0]
        assert 0.5 <= delay <= 0.55

    async def test_retry_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that every retry records an attempt event."""
        fn = AsyncMock(side_effect=[Transient(status=503), Succeeded("ok")])

        with caplog.at_level("WARNING"):
            await with_retry(fn, 2, label="list users", sleep=AsyncMock())

        assert "Attempt 1/2 of list users failed" in caplog.text

    async def test_rejects_zero_attempts(self) -> None:
        """Test that max_attempts must be positive."""
        with pytest.raises(ValueError):
            await with_retry(AsyncMock(), 0)
