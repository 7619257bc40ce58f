"""Notion page payloads for resolved tasks."""

import json
from typing import Any

from .config import DEFAULT_WORKFLOW_SOURCE, TaskPropertyNames
from .models import ResolvedTask

CALLOUT_ICON = "🤖"
CALLOUT_COLOR = "blue_background"

# Notion rejects rich text content longer than this
MAX_RICH_TEXT_LENGTH = 2000


def _text(content: str) -> dict[str, Any]:
    return {"type": "text", "text": {"content": content[:MAX_RICH_TEXT_LENGTH]}}


def _audit_callout(cost: float, request: Any, source: str) -> dict[str, Any]:
    """Callout block recording where the task came from and what it cost."""
    return {
        "object": "block",
        "type": "callout",
        "callout": {
            "icon": {"emoji": CALLOUT_ICON},
            "color": CALLOUT_COLOR,
            "rich_text": [
                _text(
                    f"This task was created via the {source}. "
                    f"The cost of this request was ${cost:.4f}."
                )
            ],
            "children": [
                {
                    "type": "paragraph",
                    "paragraph": {
                        "rich_text": [
                            _text(
                                "Full request details for this task "
                                "(may contain other tasks):"
                            )
                        ]
                    },
                },
                {
                    "type": "code",
                    "code": {
                        "language": "json",
                        "rich_text": [_text(json.dumps(request, indent=2, default=str))],
                    },
                },
            ],
        },
    }


def build_task_payload(
    task: ResolvedTask,
    tasks_database_id: str,
    cost: float = 0.0,
    request: Any = None,
    source: str = DEFAULT_WORKFLOW_SOURCE,
    properties: TaskPropertyNames | None = None,
) -> dict[str, Any]:
    """
    Build the pages.create payload for one resolved task.

    Assignee, due date and project properties are only present when the
    task carries them.

    Args:
        task: Resolved task
        tasks_database_id: Database the page is created in
        cost: Language model cost of the whole request, in dollars
        request: Original request body, embedded for auditing
        source: Value of the Source select property
        properties: Property names of the tasks database

    Returns:
        Payload dictionary for the Notion pages endpoint
    """
    names = properties or TaskPropertyNames()

    page_properties: dict[str, Any] = {
        names.title: {"title": [{"text": {"content": task.task}}]},
        names.source: {"select": {"name": source}},
    }
    if task.assignee is not None:
        page_properties[names.assignee] = {"people": [{"id": task.assignee.id}]}
    if task.due is not None:
        page_properties[names.due] = {"date": {"start": task.due}}
    if task.project is not None:
        page_properties[names.project] = {"relation": [{"id": task.project.id}]}

    return {
        "parent": {"database_id": tasks_database_id},
        "properties": page_properties,
        "children": [_audit_callout(cost, request, source)],
    }
