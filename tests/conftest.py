"""Shared fixtures for task inbox tests."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from task_inbox.notion_sync.dispatcher import RateLimitedDispatcher


class FakeAPIError(Exception):
    """Stand-in for notion_client.APIResponseError (status plus headers)."""

    def __init__(self, status: int, headers: dict[str, str] | None = None) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.headers = headers or {}


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def api_error() -> Callable[..., FakeAPIError]:
    """Factory for API errors carrying a status code and headers."""

    def _make(status: int, headers: dict[str, str] | None = None) -> FakeAPIError:
        return FakeAPIError(status, headers)

    return _make


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock and sleep pair that never really waits."""
    return FakeClock()


@pytest.fixture
def dispatcher() -> RateLimitedDispatcher:
    """Dispatcher without spacing, for tests that do not check timing."""
    return RateLimitedDispatcher(min_interval=0.0)


@pytest.fixture
def person_records() -> list[dict[str, Any]]:
    """Users as returned by the Notion users endpoint."""
    return [
        {"object": "user", "id": "u1", "type": "person", "name": "Jonathan Smith"},
        {"object": "user", "id": "u2", "type": "person", "name": "Jane Doe"},
        {"object": "user", "id": "b1", "type": "bot", "name": "Zapier"},
    ]


def project_page(page_id: str, title: str | None, property_name: str = "Name") -> dict[str, Any]:
    """Build a database row as returned by a Notion database query."""
    fragments = [] if title is None else [{"type": "text", "plain_text": title}]
    return {
        "object": "page",
        "id": page_id,
        "properties": {property_name: {"id": "title", "type": "title", "title": fragments}},
    }


@pytest.fixture
def make_project_page() -> Callable[..., dict[str, Any]]:
    """Factory for project database rows."""
    return project_page
