"""Notion API gateway and directory listing."""

import logging
from typing import Any

from notion_client import AsyncClient

from .config import DEFAULT_PAGE_SIZE, NOTION_API_VERSION
from .exceptions import NotionSyncError
from .models import DirectoryCandidate, DirectoryKind
from .normalizer import normalize_all
from .pagination import PaginatedCollector

logger = logging.getLogger(__name__)


class NotionGateway:
    """The three Notion operations the pipeline relies on."""

    def __init__(
        self,
        api_key: str | None = None,
        projects_database_id: str | None = None,
        client: AsyncClient | None = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            api_key: Notion integration token (ignored if client is given)
            projects_database_id: Database listing the workspace's projects
            client: Preconfigured notion_client.AsyncClient
        """
        self.projects_database_id = projects_database_id
        self._client = client or AsyncClient(
            auth=api_key, notion_version=NOTION_API_VERSION
        )

    async def list_people(self, params: dict[str, Any]) -> dict[str, Any]:
        """List workspace users (one page)."""
        return await self._client.users.list(**params)

    async def query_records(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Query the projects database (one page).

        Only the title property is requested.
        """
        body = {"page_size": params.get("page_size", DEFAULT_PAGE_SIZE)}
        if params.get("start_cursor"):
            body["start_cursor"] = params["start_cursor"]

        return await self._client.request(
            path=f"databases/{self.projects_database_id}/query",
            method="POST",
            query={"filter_properties": ["title"]},
            body=body,
        )

    async def create_record(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a page from a fully built payload."""
        return await self._client.pages.create(**payload)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


class NotionDirectory:
    """Fetches people or projects as fresh match candidates."""

    def __init__(self, gateway: NotionGateway, collector: PaginatedCollector) -> None:
        self._gateway = gateway
        self._collector = collector

    async def fetch_candidates(self, kind: DirectoryKind) -> list[DirectoryCandidate]:
        """
        Run one full listing and normalize it.

        Raises:
            RemoteCallError: If a page request fails for good
            ProtocolViolationError: If the listing breaks the cursor contract
        """
        if kind is DirectoryKind.PERSON:
            records = await self._collector.collect(
                self._gateway.list_people, label="people"
            )
        else:
            if not self._gateway.projects_database_id:
                raise NotionSyncError("Projects database id is not configured")
            records = await self._collector.collect(
                self._gateway.query_records, label="projects"
            )
        return normalize_all(records, kind)
