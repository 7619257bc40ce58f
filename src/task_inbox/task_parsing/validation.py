"""Validation of incoming requests and of LLM task output."""

import html
import json
import logging
import re
from datetime import datetime
from typing import Any

import json_repair

from task_inbox.notion_sync.models import RawTask

from .config import MAX_REQUESTER_NAME_LENGTH, TASK_TEXT_PATTERN
from .exceptions import RequestValidationError, ResponseParseError
from .models import TaskRequest

logger = logging.getLogger(__name__)

_TASK_TEXT_RE = re.compile(TASK_TEXT_PATTERN)


def _required_string(body: dict[str, Any], key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RequestValidationError(f"Invalid data: \"{key}\" is required")
    return value.strip()


def validate_request(body: Any) -> TaskRequest:
    """
    Validate a request sent by a shortcut or automation.

    Text fields are HTML-escaped before they are checked.

    Args:
        body: Decoded JSON body with task, name and date

    Returns:
        Validated TaskRequest

    Raises:
        RequestValidationError: If a field is missing or malformed
    """
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")

    task = html.escape(_required_string(body, "task"))
    name = html.escape(_required_string(body, "name"))
    raw_date = _required_string(body, "date")

    if not _TASK_TEXT_RE.match(task):
        raise RequestValidationError(
            "Invalid data: Task must only contain letters, numbers, and punctuation."
        )
    if len(name) > MAX_REQUESTER_NAME_LENGTH:
        raise RequestValidationError(
            f"Invalid data: Name must be {MAX_REQUESTER_NAME_LENGTH} characters or less."
        )

    try:
        date = datetime.fromisoformat(raw_date)
    except ValueError as e:
        raise RequestValidationError(
            "Invalid data: Date must be a string in ISO 8601 format."
        ) from e

    return TaskRequest(task=task, name=name, date=date)


def _extract_json_span(text: str) -> str:
    """Cut out the outermost JSON object or array from surrounding prose."""
    starts = [index for index in (text.find("{"), text.find("[")) if index != -1]
    ends = [index for index in (text.rfind("}"), text.rfind("]")) if index != -1]
    if not starts or not ends or max(ends) < min(starts):
        raise ResponseParseError("No JSON object or array found.")
    return text[min(starts) : max(ends) + 1]


def parse_llm_response(text: str) -> list[RawTask]:
    """
    Turn the model's reply into raw tasks.

    Replies that are not valid JSON are repaired: prose and code fences
    around the outermost JSON span are cut away, then json_repair fixes
    slips such as trailing commas or single quotes. A single object, an
    array, or an object with a "tasks" array are accepted. Entries without a task name are dropped.

    Args:
        text: Raw reply content

    Returns:
        Raw tasks in reply order

    Raises:
        ResponseParseError: If no JSON can be recovered
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = json_repair.loads(_extract_json_span(text))
        if data is None or data == "":
            raise ResponseParseError("Invalid JSON response from the language model.")
        logger.warning("Repaired invalid JSON in the language model response")

    if isinstance(data, dict):
        entries = data["tasks"] if isinstance(data.get("tasks"), list) else [data]
    elif isinstance(data, list):
        entries = data
    else:
        raise ResponseParseError(f"Unexpected JSON type in response: {type(data).__name__}")

    tasks = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Ignoring non-object task entry: {entry!r}")
            continue
        try:
            tasks.append(RawTask.from_dict(entry))
        except ValueError as e:
            logger.warning(f"Ignoring task entry: {e}")

    return tasks
