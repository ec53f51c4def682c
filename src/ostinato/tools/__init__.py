"""Tool definitions and lookup for ostinato agents.

Tools are async functions returning a string observation. They are either
registered globally with the ``@tool`` decorator or wrapped with
``build_tool`` and handed to an agent through a ``ToolRegistry``.

Usage::

    from ostinato.tools import ToolRegistry, tool

    @tool(description="Look up the current weather")
    async def get_weather(city: str) -> str:
        ...

    registry = ToolRegistry.from_registered(["get_weather"])
"""

from ostinato.tools.base import Tool, ToolFunction, ToolParameter, ToolSchema
from ostinato.tools.registry import (
    ToolRegistry,
    build_tool,
    clear_tools,
    get_all_tools,
    get_tool,
    tool,
)

__all__ = [
    "Tool",
    "ToolFunction",
    "ToolParameter",
    "ToolRegistry",
    "ToolSchema",
    "build_tool",
    "clear_tools",
    "get_all_tools",
    "get_tool",
    "tool",
]
