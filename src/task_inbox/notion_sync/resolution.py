"""Resolution of raw tasks' assignee and project references."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from .exceptions import NotionSyncError
from .fuzzy_resolver import FuzzyResolver
from .models import DirectoryCandidate, DirectoryKind, Matched, RawTask, ResolvedTask

logger = logging.getLogger(__name__)


class CandidateSource(Protocol):
    """Anything that can list fresh candidates for a directory kind."""

    async def fetch_candidates(self, kind: DirectoryKind) -> list[DirectoryCandidate]: ...


class _PassCache:
    """Directory listings memoized for one resolve_all call."""

    def __init__(self, source: CandidateSource) -> None:
        self._source = source
        self._listings: dict[DirectoryKind, list[DirectoryCandidate]] = {}
        self._locks = {kind: asyncio.Lock() for kind in DirectoryKind}

    async def fetch_candidates(self, kind: DirectoryKind) -> list[DirectoryCandidate]:
        async with self._locks[kind]:
            # Failed listings are not stored, so the next task tries again
            if kind not in self._listings:
                self._listings[kind] = await self._source.fetch_candidates(kind)
            return self._listings[kind]


class TaskResolver:
    """
    Resolves assignee and project references of raw tasks.

    Each task is resolved independently and concurrently; remote calls are
    still serialized by the shared dispatcher underneath the directory.
    """

    def __init__(
        self,
        directory: CandidateSource,
        resolver: FuzzyResolver,
        memoize: bool = True,
    ) -> None:
        """
        Initialize the task resolver.

        Args:
            directory: Source of person and project candidates
            resolver: Fuzzy resolver applying the match threshold
            memoize: Reuse each directory listing within one resolve_all call
        """
        self._directory = directory
        self._resolver = resolver
        self._memoize = memoize

    async def resolve_all(self, raw_tasks: Sequence[RawTask]) -> list[ResolvedTask]:
        """
        Resolve every task, keeping input order.

        Args:
            raw_tasks: Tasks produced by the language model

        Returns:
            One ResolvedTask per input task, in the same order
        """
        source: CandidateSource = (
            _PassCache(self._directory) if self._memoize else self._directory
        )
        resolved = await asyncio.gather(
            *(self._resolve_task(task, source) for task in raw_tasks)
        )
        logger.info(f"Resolved {len(resolved)} task(s)")
        return list(resolved)

    async def _resolve_task(self, raw: RawTask, source: CandidateSource) -> ResolvedTask:
        result = ResolvedTask(task=raw.task_name, due=raw.due_date)

        if raw.assignee:
            result.assignee = await self._resolve_field(
                result, "assignee", raw.assignee, DirectoryKind.PERSON, source
            )
        if raw.project:
            result.project = await self._resolve_field(
                result, "project", raw.project, DirectoryKind.PROJECT, source
            )

        return result

    async def _resolve_field(
        self,
        result: ResolvedTask,
        field_name: str,
        query: str,
        kind: DirectoryKind,
        source: CandidateSource,
    ) -> DirectoryCandidate | None:
        try:
            candidates = await source.fetch_candidates(kind)
        except NotionSyncError as e:
            logger.error(
                f"Could not list {kind.value} directory for '{result.task}' "
                f"{field_name}: {e}"
            )
            result.errors[field_name] = str(e)
            return None

        match = self._resolver.resolve(query, candidates)
        if isinstance(match, Matched):
            return match.candidate
        return None
