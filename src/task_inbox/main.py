"""Command-line interface for the task inbox."""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import datetime

from .exceptions import TaskInboxError
from .logging_utils import configure_logging
from .notion_sync.config import NotionSyncSettings
from .notion_sync.gateway import NotionGateway
from .notion_sync.models import ResolvedTask, SubmissionReport
from .service import TaskInboxService
from .task_parsing.config import DEFAULT_OLLAMA_MODEL
from .task_parsing.llm_parser import LLMTaskParser

logger = logging.getLogger(__name__)


def match_threshold(value: str) -> float:
    """Parse a fuzzy match threshold between 0 and 1."""
    try:
        threshold = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid threshold: {value!r}") from e
    if not 0.0 <= threshold <= 1.0:
        raise argparse.ArgumentTypeError(f"threshold must be between 0 and 1, got {threshold}")
    return threshold


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Task Inbox CLI - Turn a free-text request into Notion tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  task-inbox "Ask Jon to draft the proposal by Friday" --name Sam
  task-inbox "Call the bank tomorrow" --name Sam --dry-run
  task-inbox "Review the Q3 budget" --name Sam --threshold 0.2 -v

Environment:
  NOTION_API_KEY       Notion integration token
  NOTION_TASKS_DB      Database the tasks are created in
  NOTION_PROJECTS_DB   Database projects are matched against
        """,
    )

    parser.add_argument("task", help="Free-text request describing one or more tasks")

    parser.add_argument(
        "--name",
        required=True,
        help="Name of the person sending the request",
    )

    parser.add_argument(
        "--date",
        default=None,
        metavar="ISO_DATE",
        help="Date of the request in ISO 8601 format (default: now)",
    )

    parser.add_argument(
        "--threshold",
        type=match_threshold,
        default=None,
        help="Fuzzy match threshold, 0 = exact only, 1 = anything (default: 0.4)",
    )

    parser.add_argument(
        "--model",
        default=DEFAULT_OLLAMA_MODEL,
        help=f"Ollama model used to split the request (default: {DEFAULT_OLLAMA_MODEL})",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve assignees and projects without creating tasks",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and debug information",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (most verbose, includes every Notion call)",
    )

    return parser


def build_settings(args: argparse.Namespace) -> NotionSyncSettings:
    """Settings from the environment, overridden by command-line flags."""
    settings = NotionSyncSettings.from_env()
    if args.threshold is not None:
        settings = replace(settings, match_threshold=args.threshold)
    return settings


def print_resolved(tasks: list[ResolvedTask]) -> None:
    """Print resolved tasks for a dry run."""
    for index, task in enumerate(tasks, start=1):
        assignee = task.assignee.name if task.assignee else "-"
        project = task.project.name if task.project else "-"
        print(f"[{index}] {task.task} (assignee: {assignee}, project: {project}, due: {task.due or '-'})")
        for field_name, error in task.errors.items():
            print(f"    ⚠️ {field_name} not resolved: {error}")


def print_report(report: SubmissionReport) -> None:
    """Print the outcome of a submission."""
    for result in report.results:
        if result.succeeded:
            print(f"✅ {result.task.task}")
        else:
            print(f"❌ {result.task.task}: {result.error}")

    if report.error and not report.results:
        print(f"❌ {report.error}")
    print(f"Created {report.created}, failed {report.failed}, AI cost ${report.cost:.3f}")


async def main(args: argparse.Namespace) -> int:
    """
    Run one request.

    Returns:
        Process exit code
    """
    try:
        settings = build_settings(args)
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1

    gateway = NotionGateway(
        api_key=settings.api_key, projects_database_id=settings.projects_database_id
    )
    body = {
        "task": args.task,
        "name": args.name,
        "date": args.date or datetime.now().astimezone().isoformat(),
    }

    try:
        service = TaskInboxService.from_settings(
            settings, parser=LLMTaskParser(model=args.model), gateway=gateway
        )
        if args.dry_run:
            print_resolved(await service.preview(body))
            return 0

        report = await service.submit(body)
        print_report(report)
        return 0 if report.success else 1
    except TaskInboxError as e:
        print(f"❌ {e}")
        return 1
    finally:
        await gateway.close()


def cli_entry_with_args() -> None:
    """CLI entry point with argument parsing."""
    parser = create_argument_parser()
    args = parser.parse_args()
    configure_logging(verbose=args.verbose, trace=args.trace)

    try:
        sys.exit(asyncio.run(main(args)))
    except KeyboardInterrupt:
        print("\n👋 Cancelled")
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_with_args()
