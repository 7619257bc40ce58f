"""Task inbox service turning requests into Notion tasks."""

import logging
import time
from typing import Any

from .exceptions import TaskInboxError
from .notion_sync.config import NotionSyncSettings
from .notion_sync.dispatcher import RateLimitedDispatcher, get_dispatcher
from .notion_sync.fuzzy_resolver import FuzzyResolver
from .notion_sync.gateway import NotionDirectory, NotionGateway
from .notion_sync.models import ResolvedTask, SubmissionReport
from .notion_sync.pagination import PaginatedCollector
from .notion_sync.resolution import TaskResolver
from .notion_sync.writer import TaskWriter
from .task_parsing.cost import calculate_cost
from .task_parsing.llm_parser import LLMTaskParser
from .task_parsing.models import ParsedTasks
from .task_parsing.validation import validate_request

logger = logging.getLogger(__name__)


class TaskInboxService:
    """
    Service for turning free-text requests into Notion tasks.

    Coordinates request validation, LLM parsing, directory resolution and
    the write pipeline.
    """

    def __init__(
        self,
        parser: LLMTaskParser,
        resolver: TaskResolver,
        writer: TaskWriter,
    ) -> None:
        """
        Initialize the service.

        Args:
            parser: LLM task parser
            resolver: Assignee and project resolver
            writer: Notion write pipeline
        """
        self._parser = parser
        self._resolver = resolver
        self._writer = writer

    @classmethod
    def from_settings(
        cls,
        settings: NotionSyncSettings,
        parser: LLMTaskParser | None = None,
        gateway: NotionGateway | None = None,
        dispatcher: RateLimitedDispatcher | None = None,
    ) -> "TaskInboxService":
        """
        Wire a service from settings, sharing the process-wide dispatcher.

        Raises:
            TaskInboxError: If the tasks database id is missing
        """
        if not settings.tasks_database_id:
            raise TaskInboxError("NOTION_TASKS_DB is not configured")

        dispatcher = dispatcher or get_dispatcher(
            min_interval=settings.min_interval, max_concurrent=settings.max_concurrent
        )
        gateway = gateway or NotionGateway(
            api_key=settings.api_key,
            projects_database_id=settings.projects_database_id,
        )
        collector = PaginatedCollector(dispatcher, max_attempts=settings.read_max_attempts)
        resolver = TaskResolver(
            NotionDirectory(gateway, collector),
            FuzzyResolver(threshold=settings.match_threshold),
        )
        writer = TaskWriter(
            gateway.create_record,
            dispatcher,
            settings.tasks_database_id,
            max_attempts=settings.write_max_attempts,
            source=settings.workflow_source,
            properties=settings.properties,
        )
        return cls(parser or LLMTaskParser(), resolver, writer)

    async def _parse(self, body: Any) -> ParsedTasks:
        request = validate_request(body)
        logger.info(f"🎯 Request from {request.name}: '{request.task}'")
        return await self._parser.parse(request)

    async def preview(self, body: Any) -> list[ResolvedTask]:
        """
        Parse and resolve a request without creating anything.

        Raises:
            TaskParsingError: If the request or the LLM reply is invalid
        """
        parsed = await self._parse(body)
        return await self._resolver.resolve_all(parsed.tasks)

    async def submit(self, body: Any) -> SubmissionReport:
        """
        Create Notion tasks from a request.

        Args:
            body: Request body with task, name and date

        Returns:
            SubmissionReport with per-task results; never raises for
            validation, parsing or Notion failures
        """
        start_time = time.time()

        try:
            parsed = await self._parse(body)
            cost = calculate_cost(parsed.usage, parsed.model)
            logger.info(f"📊 AI cost: ${cost:.3f} ({parsed.model})")

            resolved = await self._resolver.resolve_all(parsed.tasks)
            for task in resolved:
                logger.info(f"Resolved task: {task.to_dict()}")

            results = await self._writer.create_all(resolved, cost=cost, request=body)
        except TaskInboxError as e:
            error_msg = f"Task submission failed: {e}"
            logger.error(error_msg)
            return SubmissionReport(
                processing_time=time.time() - start_time, error=error_msg
            )

        report = SubmissionReport(
            results=results, cost=cost, processing_time=time.time() - start_time
        )
        if report.success:
            logger.info(
                f"🎉 Created {report.created} task(s), {report.failed} failed, "
                f"in {report.processing_time:.3f}s"
            )
        else:
            report.error = f"All {report.failed} task(s) failed"
            logger.error(f"❌ {report.error}")
        return report

