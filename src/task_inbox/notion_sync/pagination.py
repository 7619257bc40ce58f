"""Cursor-paginated collection of Notion listings."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .config import DEFAULT_PAGE_SIZE, DEFAULT_READ_MAX_ATTEMPTS
from .dispatcher import RateLimitedDispatcher
from .exceptions import ProtocolViolationError
from .models import CollectionPage
from .retry import with_retry

logger = logging.getLogger(__name__)

PageFetcher = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class PaginatedCollector:
    """
    Walks a cursor-paginated endpoint to completion.

    Every page request goes through the shared dispatcher and the read
    retry policy. Page N+1 is requested only after page N has been consumed,
    since its cursor comes from page N.
    """

    def __init__(
        self,
        dispatcher: RateLimitedDispatcher,
        max_attempts: int = DEFAULT_READ_MAX_ATTEMPTS,
        **retry_options: Any,
    ) -> None:
        """
        Initialize the collector.

        Args:
            dispatcher: Shared rate-limited dispatcher
            max_attempts: Attempts per page request
            retry_options: Extra keyword arguments for with_retry
        """
        self._dispatcher = dispatcher
        self._max_attempts = max_attempts
        self._retry_options = retry_options

    async def collect(
        self,
        fetch_page: PageFetcher,
        page_size: int = DEFAULT_PAGE_SIZE,
        label: str = "listing",
    ) -> list[dict[str, Any]]:
        """
        Fetch every page of a listing.

        Args:
            fetch_page: Remote operation taking {page_size, start_cursor?}
            page_size: Items requested per page
            label: Description used in log messages

        Returns:
            All items, in arrival order

        Raises:
            ProtocolViolationError: If a page claims more results without a
                usable next cursor
            RemoteCallError: If a page request fails for good
        """
        items: list[dict[str, Any]] = []
        cursor: str | None = None
        seen_cursors: set[str] = set()
        page_number = 0

        while True:
            page_number += 1
            params: dict[str, Any] = {"page_size": page_size}
            if cursor is not None:
                params["start_cursor"] = cursor

            response = await with_retry(
                lambda: self._dispatcher.dispatch(lambda: fetch_page(params)),
                self._max_attempts,
                label=f"{label} page {page_number}",
                **self._retry_options,
            )
            page = CollectionPage.from_response(response)
            items.extend(page.items)

            logger.debug(
                f"{label}: page {page_number} returned {len(page.items)} items "
                f"(has_more={page.has_more})"
            )

            if not page.has_more:
                break

            if page.next_cursor is None:
                raise ProtocolViolationError(
                    f"{label}: page {page_number} has more results but no next_cursor"
                )
            if page.next_cursor in seen_cursors:
                raise ProtocolViolationError(
                    f"{label}: page {page_number} returned already visited cursor "
                    f"{page.next_cursor!r}"
                )
            seen_cursors.add(page.next_cursor)
            cursor = page.next_cursor

        logger.info(f"{label}: collected {len(items)} items from {page_number} page(s)")
        return items
