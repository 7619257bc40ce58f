"""Configuration constants for Notion directory resolution and task writes."""

import os
from dataclasses import dataclass, field

# Rate limiting (Notion allows an average of three requests per second)
DEFAULT_MIN_INTERVAL = 0.333  # seconds between call starts
DEFAULT_MAX_CONCURRENT = 1
DEFAULT_THROTTLE_WAIT = 0.4  # seconds, used when Retry-After is missing

# Retry
DEFAULT_READ_MAX_ATTEMPTS = 2
DEFAULT_WRITE_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF = 0.5  # seconds
DEFAULT_RETRY_JITTER = 0.1  # fraction of backoff

# Pagination
DEFAULT_PAGE_SIZE = 100

# Fuzzy matching (0 = identical, 1 = unrelated)
DEFAULT_MATCH_THRESHOLD = 0.4

# Task database
DEFAULT_WORKFLOW_SOURCE = "iOS Shortcut"
NOTION_API_VERSION = "2022-06-28"


@dataclass(frozen=True)
class TaskPropertyNames:
    """Property names of the Notion tasks database."""

    title: str = "Name"
    source: str = "Source"
    assignee: str = "Assignee"
    due: str = "Due"
    project: str = "Project"


@dataclass(frozen=True)
class NotionSyncSettings:
    """Runtime settings for the Notion side of the pipeline."""

    api_key: str | None = None
    tasks_database_id: str | None = None
    projects_database_id: str | None = None
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    min_interval: float = DEFAULT_MIN_INTERVAL
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    read_max_attempts: int = DEFAULT_READ_MAX_ATTEMPTS
    write_max_attempts: int = DEFAULT_WRITE_MAX_ATTEMPTS
    workflow_source: str = DEFAULT_WORKFLOW_SOURCE
    properties: TaskPropertyNames = field(default_factory=TaskPropertyNames)

    def __post_init__(self) -> None:
        if not 0.0 <= self.match_threshold <= 1.0:
            raise ValueError(
                f"match_threshold must be between 0 and 1, got {self.match_threshold}"
            )
        if self.min_interval < 0:
            raise ValueError(f"min_interval must not be negative, got {self.min_interval}")
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {self.max_concurrent}")

    @classmethod
    def from_env(cls) -> "NotionSyncSettings":
        """
        Build settings from environment variables.

        Reads NOTION_API_KEY, NOTION_TASKS_DB, NOTION_PROJECTS_DB and the
        optional TASK_INBOX_MATCH_THRESHOLD, TASK_INBOX_MIN_INTERVAL_MS and
        TASK_INBOX_MAX_CONCURRENT overrides.
        """
        min_interval_ms = os.environ.get("TASK_INBOX_MIN_INTERVAL_MS")
        return cls(
            api_key=os.environ.get("NOTION_API_KEY"),
            tasks_database_id=os.environ.get("NOTION_TASKS_DB"),
            projects_database_id=os.environ.get("NOTION_PROJECTS_DB"),
            match_threshold=float(
                os.environ.get("TASK_INBOX_MATCH_THRESHOLD", DEFAULT_MATCH_THRESHOLD)
            ),
            min_interval=(
                int(min_interval_ms) / 1000
                if min_interval_ms
                else DEFAULT_MIN_INTERVAL
            ),
            max_concurrent=int(
                os.environ.get("TASK_INBOX_MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT)
            ),
        )
