"""Tests for the write pipeline."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from task_inbox.notion_sync.dispatcher import RateLimitedDispatcher
from task_inbox.notion_sync.models import DirectoryCandidate, ResolvedTask
from task_inbox.notion_sync.writer import TaskWriter


@pytest.fixture
def resolved_tasks() -> list[ResolvedTask]:
    return [
        ResolvedTask(task="Draft proposal", assignee=DirectoryCandidate("Jonathan Smith", "u1")),
        ResolvedTask(task="Book venue", due="2024-05-03"),
        ResolvedTask(task="Call the bank"),
    ]


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateAll:
    """Test creating batches of tasks."""

    async def test_all_tasks_created(
        self, dispatcher: RateLimitedDispatcher, resolved_tasks: list[ResolvedTask]
    ) -> None:
        create_record = AsyncMock(side_effect=[{"id": "p1"}, {"id": "p2"}, {"id": "p3"}])
        writer = TaskWriter(create_record, dispatcher, "tasks-db")

        results = await writer.create_all(resolved_tasks, cost=0.01, request={"task": "x"})

        assert [result.response for result in results] == [
            {"id": "p1"},
            {"id": "p2"},
            {"id": "p3"},
        ]
        assert all(result.succeeded for result in results)
        assert [result.task for result in results] == resolved_tasks

    async def test_payloads_target_tasks_database(
        self, dispatcher: RateLimitedDispatcher, resolved_tasks: list[ResolvedTask]
    ) -> None:
        create_record = AsyncMock(return_value={"id": "p"})
        writer = TaskWriter(create_record, dispatcher, "tasks-db", source="Tasker")

        await writer.create_all(resolved_tasks[:1])

        payload = create_record.await_args.args[0]
        assert payload["parent"] == {"database_id": "tasks-db"}
        assert payload["properties"]["Assignee"] == {"people": [{"id": "u1"}]}
        assert payload["properties"]["Source"] == {"select": {"name": "Tasker"}}

    async def test_middle_failure_is_isolated(
        self,
        dispatcher: RateLimitedDispatcher,
        resolved_tasks: list[ResolvedTask],
        api_error: Any,
    ) -> None:
        """Test that a terminal failure on task 2 does not stop task 3."""
        create_record = AsyncMock(side_effect=[{"id": "p1"}, api_error(400), {"id": "p3"}])
        writer = TaskWriter(create_record, dispatcher, "tasks-db", sleep=AsyncMock())

        results = await writer.create_all(resolved_tasks)

        assert [result.succeeded for result in results] == [True, False, True]
        assert "400" in results[1].error
        assert results[2].response == {"id": "p3"}
        assert create_record.await_count == 3

    async def test_non_dict_response_does_not_break_siblings(
        self, dispatcher: RateLimitedDispatcher, resolved_tasks: list[ResolvedTask]
    ) -> None:
        create_record = AsyncMock(side_effect=[{"id": "p1"}, None, {"id": "p3"}])
        writer = TaskWriter(create_record, dispatcher, "tasks-db")

        results = await writer.create_all(resolved_tasks)

        assert [result.response for result in results] == [{"id": "p1"}, None, {"id": "p3"}]
        assert all(result.succeeded for result in results)

    async def test_transient_failure_retried(
        self,
        dispatcher: RateLimitedDispatcher,
        resolved_tasks: list[ResolvedTask],
        api_error: Any,
    ) -> None:
        create_record = AsyncMock(side_effect=[api_error(504), {"id": "p1"}])
        writer = TaskWriter(create_record, dispatcher, "tasks-db", sleep=AsyncMock())

        [result] = await writer.create_all(resolved_tasks[:1])

        assert result.succeeded
        assert create_record.await_count == 2

    async def test_writes_give_up_after_three_attempts(
        self,
        dispatcher: RateLimitedDispatcher,
        resolved_tasks: list[ResolvedTask],
        api_error: Any,
    ) -> None:
        create_record = AsyncMock(side_effect=api_error(503))
        writer = TaskWriter(create_record, dispatcher, "tasks-db", sleep=AsyncMock())

        [result] = await writer.create_all(resolved_tasks[:1])

        assert not result.succeeded
        assert create_record.await_count == 3

    async def test_writes_share_the_dispatcher(
        self, resolved_tasks: list[ResolvedTask], fake_clock: Any
    ) -> None:
        """Test that concurrent creations are spaced by the shared limiter."""
        dispatcher = RateLimitedDispatcher(
            min_interval=0.333, clock=fake_clock, sleep=fake_clock.sleep
        )
        starts: list[float] = []

        async def create_record(payload: dict[str, Any]) -> dict[str, Any]:
            starts.append(fake_clock())
            return {"id": payload["properties"]["Name"]["title"][0]["text"]["content"]}

        writer = TaskWriter(create_record, dispatcher, "tasks-db")

        results = await writer.create_all(resolved_tasks)

        assert starts == pytest.approx([0.0, 0.333, 0.666])
        assert [result.response["id"] for result in results] == [
            "Draft proposal",
            "Book venue",
            "Call the bank",
        ]
