"""Write pipeline creating resolved tasks in the Notion tasks database."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from .config import DEFAULT_WORKFLOW_SOURCE, DEFAULT_WRITE_MAX_ATTEMPTS, TaskPropertyNames
from .dispatcher import RateLimitedDispatcher
from .exceptions import NotionSyncError
from .models import ResolvedTask, WriteResult
from .payloads import build_task_payload
from .retry import with_retry

logger = logging.getLogger(__name__)

RecordCreator = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class TaskWriter:
    """
    Creates one Notion page per resolved task.

    Each creation is dispatched and retried on its own, so a failed task
    never stops its siblings.
    """

    def __init__(
        self,
        create_record: RecordCreator,
        dispatcher: RateLimitedDispatcher,
        tasks_database_id: str,
        max_attempts: int = DEFAULT_WRITE_MAX_ATTEMPTS,
        source: str = DEFAULT_WORKFLOW_SOURCE,
        properties: TaskPropertyNames | None = None,
        **retry_options: Any,
    ) -> None:
        """
        Initialize the task writer.

        Args:
            create_record: Remote page creation operation
            dispatcher: Shared rate-limited dispatcher
            tasks_database_id: Database the tasks are created in
            max_attempts: Attempts per creation call
            source: Value of the Source select property
            properties: Property names of the tasks database
            retry_options: Extra keyword arguments for with_retry
        """
        self._create_record = create_record
        self._dispatcher = dispatcher
        self._tasks_database_id = tasks_database_id
        self._max_attempts = max_attempts
        self._source = source
        self._properties = properties
        self._retry_options = retry_options

    async def create_all(
        self,
        tasks: Sequence[ResolvedTask],
        cost: float = 0.0,
        request: Any = None,
    ) -> list[WriteResult]:
        """
        Create every task.

        Args:
            tasks: Resolved tasks to create
            cost: Language model cost of the request, recorded on each page
            request: Original request body, recorded on each page

        Returns:
            One WriteResult per task, in input order
        """
        results = await asyncio.gather(
            *(self._create(task, cost, request) for task in tasks)
        )
        created = sum(1 for result in results if result.succeeded)
        logger.info(f"Created {created}/{len(results)} task(s) in Notion")
        return list(results)

    async def _create(self, task: ResolvedTask, cost: float, request: Any) -> WriteResult:
        payload = build_task_payload(
            task,
            self._tasks_database_id,
            cost=cost,
            request=request,
            source=self._source,
            properties=self._properties,
        )

        try:
            response = await with_retry(
                lambda: self._dispatcher.dispatch(lambda: self._create_record(payload)),
                self._max_attempts,
                label=f"create task '{task.task}'",
                **self._retry_options,
            )
        except NotionSyncError as e:
            logger.error(f"Error creating Notion task '{task.task}': {e}")
            return WriteResult(task=task, error=str(e))

        page_id = response.get("id") if isinstance(response, dict) else None
        logger.debug(f"Created Notion page {page_id} for '{task.task}'")
        return WriteResult(task=task, response=response)
