"""Custom exceptions for request validation and task parsing."""

from task_inbox.exceptions import TaskInboxError


class TaskParsingError(TaskInboxError):
    """Base exception for task parsing errors."""

    pass


class RequestValidationError(TaskParsingError):
    """Exception raised when an incoming request is invalid."""

    pass


class ResponseParseError(TaskParsingError):
    """Exception raised when the LLM response cannot be turned into tasks."""

    pass


class LLMParsingError(TaskParsingError):
    """Exception raised when the LLM call itself fails."""

    pass


class CostError(TaskParsingError):
    """Exception raised when token usage cannot be priced."""

    pass
