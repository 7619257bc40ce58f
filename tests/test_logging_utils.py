"""Tests for logging utilities."""

import logging

import pytest

from task_inbox.logging_utils import TRACE_LEVEL, configure_logging, get_logger


@pytest.mark.unit
class TestTraceLevel:
    """Test the custom TRACE level."""

    def test_get_logger_adds_trace(self) -> None:
        logger = get_logger("task_inbox.test")

        assert hasattr(logger, "trace")
        assert logging.getLevelName(TRACE_LEVEL) == "TRACE"

    def test_trace_records_below_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("task_inbox.test")

        with caplog.at_level(TRACE_LEVEL, logger="task_inbox.test"):
            logger.trace("spacing next call")  # type: ignore[attr-defined]

        assert [record.levelname for record in caplog.records] == ["TRACE"]

    def test_trace_suppressed_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("task_inbox.test")

        with caplog.at_level(logging.DEBUG, logger="task_inbox.test"):
            logger.trace("spacing next call")  # type: ignore[attr-defined]

        assert caplog.records == []


@pytest.mark.unit
class TestConfigureLogging:
    """Test command-line logging setup."""

    @pytest.mark.parametrize(
        ("verbose", "trace", "expected"),
        [(False, False, logging.WARNING), (True, False, logging.INFO), (False, True, logging.INFO)],
    )
    def test_third_party_loggers_quieted(self, verbose: bool, trace: bool, expected: int) -> None:
        configure_logging(verbose=verbose, trace=trace)

        assert logging.getLogger("notion_client").level == expected
        assert logging.getLogger("httpx").level == expected
