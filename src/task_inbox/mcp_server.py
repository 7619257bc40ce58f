"""MCP Server exposing the task inbox using FastMCP."""

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP

from .config import DEFAULT_MCP_HOST, DEFAULT_MCP_PORT, DEFAULT_MCP_SERVER_NAME
from .exceptions import TaskInboxError
from .notion_sync.config import NotionSyncSettings
from .notion_sync.gateway import NotionGateway
from .notion_sync.models import SubmissionReport
from .service import TaskInboxService

logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(DEFAULT_MCP_SERVER_NAME)

# Global service (initialized in cli_entry())
_service: TaskInboxService | None = None


def get_service() -> TaskInboxService:
    """Get the global task inbox service."""
    if _service is None:
        raise RuntimeError("Task inbox service not initialized")
    return _service


def set_service(service: TaskInboxService | None) -> None:
    """Set the global task inbox service (for testing)."""
    global _service
    _service = service


def _report_to_dict(report: SubmissionReport) -> dict[str, Any]:
    return {
        "success": report.success,
        "created": report.created,
        "failed": report.failed,
        "cost": round(report.cost, 6),
        "error": report.error,
        "results": [
            {
                "task": result.task.task,
                "page_id": (result.response or {}).get("id"),
                "url": (result.response or {}).get("url"),
                "error": result.error,
            }
            for result in report.results
        ],
    }


async def _create_tasks_impl(task: str, name: str, date: str) -> dict[str, Any]:
    """Implementation of create_tasks tool."""
    try:
        service = get_service()
        report = await service.submit({"task": task, "name": name, "date": date})
        return _report_to_dict(report)

    except Exception as e:
        logger.error(f"Error creating tasks: {e}")
        return {"success": False, "error": str(e)}


async def _resolve_tasks_impl(task: str, name: str, date: str) -> dict[str, Any]:
    """Implementation of resolve_tasks tool."""
    try:
        service = get_service()
        resolved = await service.preview({"task": task, "name": name, "date": date})
        return {
            "success": True,
            "tasks": [
                {**item.to_dict(), **({"errors": item.errors} if item.errors else {})}
                for item in resolved
            ],
        }

    except TaskInboxError as e:
        logger.warning(f"Could not resolve tasks: {e}")
        return {"success": False, "error": str(e)}
    except Exception as e:
        logger.error(f"Error resolving tasks: {e}")
        return {"success": False, "error": str(e)}


# FastMCP decorated wrappers (for actual MCP server)
@mcp.tool()
async def create_tasks(task: str, name: str, date: str) -> dict[str, Any]:
    """
    Create Notion tasks from a free-text request.

    Args:
        task: The request, e.g. "Ask Jon to draft the proposal by Friday"
        name: Name of the person sending the request
        date: Date of the request in ISO 8601 format

    Returns:
        Dictionary with created/failed counts and per-task results
    """
    return await _create_tasks_impl(task=task, name=name, date=date)


@mcp.tool()
async def resolve_tasks(task: str, name: str, date: str) -> dict[str, Any]:
    """
    Show how a request would be split and matched, without creating tasks.

    Args:
        task: The request text
        name: Name of the person sending the request
        date: Date of the request in ISO 8601 format

    Returns:
        Dictionary with the resolved tasks
    """
    return await _resolve_tasks_impl(task=task, name=name, date=date)


# Compatibility wrapper for tests
class MCPServer:
    """
    Compatibility wrapper for testing.

    The actual MCP server uses FastMCP with function decorators.
    This class provides a request/response interface over the same tools.
    """

    def __init__(
        self,
        service: TaskInboxService,
        server_name: str = DEFAULT_MCP_SERVER_NAME,
        host: str = DEFAULT_MCP_HOST,
        port: int = DEFAULT_MCP_PORT,
    ) -> None:
        """Initialize MCP Server wrapper."""
        self._service = service
        self._server_name = server_name
        self._host = host
        self._port = port
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the server."""
        set_service(self._service)
        self._initialized = True

    async def shutdown(self) -> None:
        """Shutdown the server."""
        set_service(None)
        self._initialized = False

    def get_available_tools(self) -> list[str]:
        """Get list of available tools."""
        return ["create_tasks", "resolve_tasks"]

    @staticmethod
    def _missing(params: dict[str, Any]) -> dict[str, Any] | None:
        for key in ("task", "name", "date"):
            if key not in params:
                return {"success": False, "error": f"Missing required field: {key}"}
        return None

    async def handle_create_tasks(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle create_tasks request."""
        missing = self._missing(params)
        if missing:
            return missing
        return await _create_tasks_impl(params["task"], params["name"], params["date"])

    async def handle_resolve_tasks(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle resolve_tasks request."""
        missing = self._missing(params)
        if missing:
            return missing
        return await _resolve_tasks_impl(params["task"], params["name"], params["date"])


async def main(transport: str = "stdio") -> None:
    """
    Run the MCP server until the transport closes.

    Args:
        transport: "stdio" or "sse"
    """
    settings = NotionSyncSettings.from_env()
    gateway = NotionGateway(
        api_key=settings.api_key, projects_database_id=settings.projects_database_id
    )
    try:
        set_service(TaskInboxService.from_settings(settings, gateway=gateway))
        logger.info(f"MCP Server initialized with 2 tools (transport={transport})")

        if transport == "stdio":
            await mcp.run_async(transport="stdio")
        else:
            logger.info(f"Server will listen on http://{DEFAULT_MCP_HOST}:{DEFAULT_MCP_PORT}")
            await mcp.run_async(transport="sse", host=DEFAULT_MCP_HOST, port=DEFAULT_MCP_PORT)
    finally:
        set_service(None)
        await gateway.close()


def cli_entry() -> None:
    """CLI entry point for the MCP server."""
    import sys

    from .logging_utils import configure_logging

    configure_logging()

    # Check for transport argument
    transport_type = "stdio"
    if len(sys.argv) > 1 and sys.argv[1] in ("stdio", "sse", "http"):
        transport_type = "sse" if sys.argv[1] == "http" else sys.argv[1]

    asyncio.run(main(transport_type))


if __name__ == "__main__":
    cli_entry()
