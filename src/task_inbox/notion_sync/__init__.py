"""Notion directory resolution, paginated ingestion and task writes."""

from .dispatcher import RateLimitedDispatcher, get_dispatcher
from .fuzzy_resolver import FuzzyResolver
from .models import (
    UNRESOLVED,
    DirectoryCandidate,
    DirectoryKind,
    Matched,
    RawTask,
    ResolvedTask,
    Unresolved,
    WriteResult,
)
from .pagination import PaginatedCollector
from .resolution import TaskResolver
from .writer import TaskWriter

__all__ = [
    "RateLimitedDispatcher",
    "get_dispatcher",
    "FuzzyResolver",
    "PaginatedCollector",
    "TaskResolver",
    "TaskWriter",
    "RawTask",
    "DirectoryCandidate",
    "DirectoryKind",
    "Matched",
    "Unresolved",
    "UNRESOLVED",
    "ResolvedTask",
    "WriteResult",
]
