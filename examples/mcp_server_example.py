"""Example demonstrating the task inbox MCP tools.

Requires NOTION_API_KEY, NOTION_TASKS_DB and NOTION_PROJECTS_DB in the
environment and a running Ollama instance.
"""

import asyncio
from datetime import date

from task_inbox.logging_utils import configure_logging
from task_inbox.mcp_server import MCPServer
from task_inbox.notion_sync.config import NotionSyncSettings
from task_inbox.service import TaskInboxService

configure_logging(verbose=True)


async def main() -> None:
    """Demonstrate MCP Server functionality."""
    service = TaskInboxService.from_settings(NotionSyncSettings.from_env())
    mcp_server = MCPServer(service=service)
    await mcp_server.initialize()

    print("Available MCP tools:", mcp_server.get_available_tools())
    print()

    request = {
        "task": "Ask Jon to draft the proposal by Friday and remind me to call the bank",
        "name": "Sam",
        "date": date.today().isoformat(),
    }

    # Example 1: Preview how the request is split and matched
    print("=== Resolving tasks (dry run) ===")
    result = await mcp_server.handle_resolve_tasks(request)
    for task in result.get("tasks", []):
        print(f"  {task}")
    print()

    # Example 2: Create the tasks in Notion
    print("=== Creating tasks ===")
    result = await mcp_server.handle_create_tasks(request)
    print(f"Created {result.get('created', 0)}, failed {result.get('failed', 0)}")
    for item in result.get("results", []):
        print(f"  {item['task']}: {item['url'] or item['error']}")
    print()

    # Example 3: A request that fails validation
    print("=== Invalid request ===")
    result = await mcp_server.handle_create_tasks({**request, "date": "someday"})
    print(f"Result: {result}")

    await mcp_server.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
