"""Base exception shared by all task-inbox subpackages."""


class TaskInboxError(Exception):
    """Base exception for task-inbox errors."""

    pass
