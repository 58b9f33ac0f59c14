"""MCP server exposing the launcher's query pipeline."""
import asyncio
import json
import logging
from typing import Any, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from seal_launcher.config import get_config
from seal_launcher.engine import SealEngine
from seal_launcher.logger import setup_logging
from seal_launcher.plugins import ChromeBookmarksPlugin
from seal_launcher.session import PickerController

logger = logging.getLogger(__name__)

SERVER_NAME = "seal-launcher"


def _text(text: str) -> List[TextContent]:
    return [TextContent(type="text", text=text)]


def _choices_payload(controller: PickerController) -> str:
    ranking = controller.engine.ranking
    query = controller.picker.query()
    rows = []
    for index, choice in enumerate(controller.picker.choices):
        row = {"index": index}
        row.update(choice.to_dict())
        row["ranking"] = ranking.explain(choice, query.strip())
        rows.append(row)
    return json.dumps(rows, indent=2)


async def health_check_tool(controller: PickerController) -> List[TextContent]:
    engine = controller.engine
    status = {
        "plugins": list(engine.plugins),
        "commands": len(engine.registry),
        "bookmarks_indexed": len(engine.indexer),
        "index_state": engine.indexer.state.value,
        "watching_bookmarks": engine.indexer.watching,
        "frecency_enabled": engine.store.enabled,
        "history_entries": len(engine.store),
        "exclusive_mode": controller.exclusive,
    }
    return _text(json.dumps(status, indent=2))


async def query_choices_tool(controller: PickerController, query: str) -> List[TextContent]:
    """Tool handler for query_choices.

    Args:
        controller: Picker controller
        query: Raw query text

    Returns:
        Ranked choices as JSON
    """
    controller.debouncer.cancel()
    controller.show(query)
    if not controller.picker.choices:
        return _text(f"No choices for query: {query}")
    return _text(_choices_payload(controller))


async def select_choice_tool(controller: PickerController, index: int) -> List[TextContent]:
    """Tool handler for select_choice."""
    choices = controller.picker.choices
    if not 0 <= index < len(choices):
        return _text(f"Error: no choice at index {index} (have {len(choices)})")

    choice = choices[index]
    result = await asyncio.to_thread(controller.complete, choice)
    return _text(result or f"Selected {choice.text}")


async def browse_bookmarks_tool(controller: PickerController, query: str = "") -> List[TextContent]:
    """Tool handler for browse_bookmarks: bookmarks-only exclusive mode."""
    plugin = controller.engine.plugins.get(ChromeBookmarksPlugin.name)
    if plugin is None:
        return _text("Chrome bookmarks plugin is not loaded")
    controller.show_exclusive(plugin.browse, query)
    if not controller.picker.choices:
        return _text("No bookmarks found")
    return _text(_choices_payload(controller))


async def dismiss_tool(controller: PickerController) -> List[TextContent]:
    controller.hide()
    return _text("Picker dismissed")


async def clear_usage_history_tool(controller: PickerController) -> List[TextContent]:
    controller.engine.clear_history()
    return _text("Usage history cleared")


async def reindex_bookmarks_tool(controller: PickerController) -> List[TextContent]:
    count = controller.engine.reindex_bookmarks()
    return _text(f"Indexed {count} bookmarks")


async def list_commands_tool(controller: PickerController) -> List[TextContent]:
    commands = [
        {
            "keyword": spec.keyword,
            "name": spec.name,
            "description": spec.description,
            "plugin": spec.plugin,
        }
        for spec in controller.engine.list_commands()
    ]
    return _text(json.dumps(commands, indent=2))


def _tool(name: str, description: str, properties: Optional[dict] = None, required: Optional[list] = None) -> Tool:
    schema = {"type": "object", "properties": properties or {}}
    if required:
        schema["required"] = required
    return Tool(name=name, description=description, inputSchema=schema)


TOOLS = [
    _tool("health_check", "Report plugin, index and usage-history status."),
    _tool(
        "query_choices",
        "Resolve a launcher query into ranked choices. Returns JSON with an index per choice.",
        {"query": {"type": "string", "description": "Text typed into the launcher"}},
        ["query"],
    ),
    _tool(
        "select_choice",
        "Select a choice from the last query result by index: records usage and performs its action.",
        {"index": {"type": "integer", "description": "Index from the last query_choices result"}},
        ["index"],
    ),
    _tool(
        "browse_bookmarks",
        "Show only Chrome bookmarks until a selection is made or the picker is dismissed.",
        {"query": {"type": "string", "description": "Optional search terms"}},
    ),
    _tool("dismiss", "Hide the picker without selecting anything."),
    _tool("clear_usage_history", "Forget every recorded selection."),
    _tool("reindex_bookmarks", "Rebuild the Chrome bookmarks index now."),
    _tool("list_commands", "List registered keyword commands."),
]


def create_server(controller: Optional[PickerController] = None) -> Server:
    """Create and configure the MCP server.

    Args:
        controller: Picker controller to serve. If None, an engine is built
            from the environment configuration (not started).

    Returns:
        Configured Server instance
    """
    if controller is None:
        controller = PickerController(SealEngine(get_config()))

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return list(TOOLS)

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}
        if name == "health_check":
            return await health_check_tool(controller)
        elif name == "query_choices":
            query = arguments.get("query", "")
            if not isinstance(query, str):
                return _text("Error: 'query' must be a string")
            return await query_choices_tool(controller, query)
        elif name == "select_choice":
            index = arguments.get("index")
            if not isinstance(index, int):
                return _text("Error: 'index' parameter is required")
            return await select_choice_tool(controller, index)
        elif name == "browse_bookmarks":
            return await browse_bookmarks_tool(controller, arguments.get("query", "") or "")
        elif name == "dismiss":
            return await dismiss_tool(controller)
        elif name == "clear_usage_history":
            return await clear_usage_history_tool(controller)
        elif name == "reindex_bookmarks":
            return await reindex_bookmarks_tool(controller)
        elif name == "list_commands":
            return await list_commands_tool(controller)
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    config = get_config()
    setup_logging(config.log_level)

    engine = SealEngine(config).start()
    controller = PickerController(engine)
    server = create_server(controller)

    try:
        async with stdio_server() as (read_stream, write_stream):
            initialization_options = server.create_initialization_options()
            await server.run(read_stream, write_stream, initialization_options)
    finally:
        engine.stop()
