"""Custom exceptions for Notion directory resolution and task writes."""

from task_inbox.exceptions import TaskInboxError


class NotionSyncError(TaskInboxError):
    """Base exception for Notion sync errors."""

    pass


class RemoteCallError(NotionSyncError):
    """Exception raised when a remote Notion call fails for good."""

    def __init__(self, message: str, status: int | None = None, attempts: int = 1) -> None:
        super().__init__(message)
        self.status = status
        self.attempts = attempts


class ThrottledError(RemoteCallError):
    """Exception raised when Notion kept rate limiting the caller."""

    def __init__(
        self, message: str, retry_after: float, status: int | None = 429, attempts: int = 1
    ) -> None:
        super().__init__(message, status=status, attempts=attempts)
        self.retry_after = retry_after


class TransientRemoteError(RemoteCallError):
    """Exception raised for server-side faults that outlived the retries."""

    pass


class TerminalClientError(RemoteCallError):
    """Exception raised for client errors (400-409) that are never retried."""

    pass


class ProtocolViolationError(NotionSyncError):
    """Exception raised when a paginated listing breaks the cursor contract."""

    pass
