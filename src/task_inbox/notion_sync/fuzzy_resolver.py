"""Approximate name matching of free-text references against candidates."""

import logging
from collections.abc import Callable, Iterable

from rapidfuzz import fuzz, utils

from .config import DEFAULT_MATCH_THRESHOLD
from .models import UNRESOLVED, DirectoryCandidate, Matched, ResolutionResult

logger = logging.getLogger(__name__)


class FuzzyResolver:
    """
    Picks the single closest candidate for a reference, or nothing.

    Scores are distances from 0 (identical) to 1 (unrelated), derived from
    rapidfuzz's weighted ratio over lower-cased, punctuation-stripped names.
    A candidate qualifies when its distance is at most ``threshold``.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        scorer: Callable[..., float] = fuzz.WRatio,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            threshold: Largest accepted distance, between 0 and 1
            scorer: rapidfuzz scorer returning a 0-100 similarity
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        self.threshold = threshold
        self._scorer = scorer

    def distance(self, query: str, name: str) -> float:
        """Distance between a query and a candidate name."""
        similarity = self._scorer(query, name, processor=utils.default_process)
        return 1.0 - similarity / 100.0

    def resolve(
        self, query: str, candidates: Iterable[DirectoryCandidate]
    ) -> ResolutionResult:
        """
        Resolve a reference to its best candidate.

        Ties go to the first candidate encountered.

        Args:
            query: Free-text name as written in the request
            candidates: Directory entries to match against

        Returns:
            Matched with the best candidate, or UNRESOLVED
        """
        if not query or not query.strip():
            return UNRESOLVED

        best: DirectoryCandidate | None = None
        best_distance = 1.0
        for candidate in candidates:
            distance = self.distance(query, candidate.name)
            if best is None or distance < best_distance:
                best = candidate
                best_distance = distance

        if best is None:
            logger.info(f"No candidates to match '{query}' against")
            return UNRESOLVED

        if best_distance > self.threshold:
            logger.info(
                f"Closest match for '{query}' is '{best.name}' at {best_distance:.3f}, "
                f"above threshold {self.threshold:.3f}"
            )
            return UNRESOLVED

        logger.info(f"Matched '{query}' to '{best.name}' ({best_distance:.3f})")
        return Matched(candidate=best, score=best_distance)
