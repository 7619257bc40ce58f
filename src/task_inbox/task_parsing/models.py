"""Data models for request validation and task parsing."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from task_inbox.notion_sync.models import RawTask


@dataclass(frozen=True)
class TaskRequest:
    """A validated incoming request."""

    task: str
    name: str
    date: datetime

    def to_dict(self) -> dict[str, str]:
        return {"task": self.task, "name": self.name, "date": self.date.isoformat()}


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by the language model."""

    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class ParsedTasks:
    """Result of LLM task parsing."""

    tasks: list[RawTask]
    usage: TokenUsage
    model: str
    metadata: dict[str, Any] = field(default_factory=dict)
