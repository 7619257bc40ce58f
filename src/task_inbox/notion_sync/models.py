"""Data models for Notion directory resolution and task writes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class DirectoryKind(str, Enum):
    """Kind of directory record a reference is resolved against."""

    PERSON = "person"
    PROJECT = "project"


@dataclass(frozen=True)
class RawTask:
    """A task as structured by the language model, before resolution."""

    task_name: str
    assignee: str | None = None
    project: str | None = None
    due_date: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawTask":
        """
        Build a RawTask from a model-produced JSON object.

        Blank optional values are treated as absent.

        Raises:
            ValueError: If task_name is missing or blank
        """
        task_name = data.get("task_name")
        if not isinstance(task_name, str) or not task_name.strip():
            raise ValueError(f"Task is missing task_name: {data!r}")

        def optional(key: str) -> str | None:
            value = data.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        return cls(
            task_name=task_name.strip(),
            assignee=optional("assignee"),
            project=optional("project"),
            due_date=optional("due_date"),
        )


@dataclass(frozen=True)
class DirectoryCandidate:
    """A normalized directory entry eligible for fuzzy matching."""

    name: str
    id: str


@dataclass(frozen=True)
class Matched:
    """Resolution outcome carrying the single best candidate."""

    candidate: DirectoryCandidate
    score: float = 0.0


@dataclass(frozen=True)
class Unresolved:
    """Resolution outcome when no candidate is close enough."""


UNRESOLVED = Unresolved()

ResolutionResult = Matched | Unresolved


@dataclass
class ResolvedTask:
    """A task whose assignee and project references have been resolved."""

    task: str
    due: str | None = None
    assignee: DirectoryCandidate | None = None
    project: DirectoryCandidate | None = None
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the task, leaving out every field that did not resolve."""
        data: dict[str, Any] = {"task": self.task}
        if self.due is not None:
            data["due"] = self.due
        if self.assignee is not None:
            data["assignee"] = {"name": self.assignee.name, "id": self.assignee.id}
        if self.project is not None:
            data["project"] = {"name": self.project.name, "id": self.project.id}
        return data


@dataclass(frozen=True)
class CollectionPage:
    """One page of a cursor-paginated listing."""

    items: list[dict[str, Any]]
    has_more: bool
    next_cursor: str | None = None

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "CollectionPage":
        """Build a page from a Notion list response."""
        return cls(
            items=list(response.get("results") or []),
            has_more=bool(response.get("has_more")),
            next_cursor=response.get("next_cursor") or None,
        )


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    """Dispatch outcome of a call that returned normally."""

    value: T


@dataclass(frozen=True)
class Throttled:
    """Dispatch outcome of a rate-limited call."""

    retry_after: float
    message: str = ""
    status: int = 429
    error: BaseException | None = None


@dataclass(frozen=True)
class Transient:
    """Dispatch outcome of a call that failed in a retryable way."""

    status: int | None
    message: str = ""
    error: BaseException | None = None


@dataclass(frozen=True)
class Terminal:
    """Dispatch outcome of a call that must not be retried."""

    status: int | None
    message: str = ""
    error: BaseException | None = None


Failure = Throttled | Transient | Terminal
DispatchOutcome = Succeeded | Throttled | Transient | Terminal


@dataclass
class WriteResult:
    """Outcome of creating a single task record."""

    task: ResolvedTask
    response: dict[str, Any] | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class SubmissionReport:
    """Summary of one submitted request."""

    results: list[WriteResult] = field(default_factory=list)
    cost: float = 0.0
    processing_time: float = 0.0
    error: str | None = None

    @property
    def created(self) -> int:
        return sum(1 for result in self.results if result.succeeded)

    @property
    def failed(self) -> int:
        return len(self.results) - self.created

    @property
    def success(self) -> bool:
        """False when nothing was parsed or every task failed."""
        return self.error is None and self.created > 0
