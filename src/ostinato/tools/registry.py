"""Tool registration and lookup."""

import inspect
from collections.abc import Callable, Iterable
from typing import Any, Union, get_args, get_origin, get_type_hints

from ostinato.tools.base import Tool, ToolFunction, ToolParameter, ToolSchema

# Global tool registry, filled by the @tool decorator
_TOOLS: dict[str, Tool] = {}


def _python_type_to_json_schema(py_type: Any) -> str:
    """Convert Python type hint to JSON Schema type.

    Args:
        py_type: Python type annotation

    Returns:
        JSON Schema type string
    """
    origin = get_origin(py_type)

    # Unwrap Union types (including Optional)
    if origin is Union or (origin is not None and type(None) in get_args(py_type)):
        non_none = [arg for arg in get_args(py_type) if arg is not type(None)]
        if non_none:
            py_type = non_none[0]
            origin = get_origin(py_type)

    # Parameterised generics such as list[str] map by their origin
    if origin is not None:
        py_type = origin

    type_map = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }

    return type_map.get(py_type, "string")


def _array_items(py_type: Any) -> dict[str, Any] | None:
    """Element schema of ``list[X]``, also when wrapped in ``| None``."""
    for candidate in (py_type, *get_args(py_type)):
        if get_origin(candidate) is list and get_args(candidate):
            return {"type": _python_type_to_json_schema(get_args(candidate)[0])}
    return None


def build_tool(fn: ToolFunction, description: str, name: str | None = None) -> Tool:
    """Build a Tool from an async function by introspecting its signature.

    Parameter descriptions are read from ``name: description`` lines in the
    docstring.

    Args:
        fn: Async function implementing the tool
        description: Human-readable description of what the tool does
        name: Tool name, defaults to the function name

    Returns:
        Tool instance (not registered)
    """
    hints = get_type_hints(fn)
    sig = inspect.signature(fn)

    parameters: list[ToolParameter] = []

    for param_name, param in sig.parameters.items():
        hint = hints.get(param_name, str)
        json_type = _python_type_to_json_schema(hint)

        param_desc = f"Parameter {param_name}"
        if fn.__doc__:
            for line in fn.__doc__.split("\n"):
                line = line.strip()
                if line.startswith(f"{param_name}:"):
                    param_desc = line[len(param_name) + 1 :].strip()
                    break

        parameters.append(
            ToolParameter(
                name=param_name,
                type=json_type,
                description=param_desc,
                required=param.default == inspect.Parameter.empty,
                items=_array_items(hint) if json_type == "array" else None,
            )
        )

    schema = ToolSchema(
        name=name or fn.__name__,
        description=description,
        parameters=parameters,
    )
    return Tool(schema=schema, fn=fn)


def tool(description: str, name: str | None = None) -> Callable[[ToolFunction], ToolFunction]:
    """Decorator to register a function as a tool.

    Args:
        description: Human-readable description of what the tool does
        name: Tool name, defaults to the function name

    Returns:
        Decorator function

    Example:
        @tool(description="Look up the current weather")
        async def get_weather(city: str) -> str:
            '''Weather lookup.

            Args:
                city: City name
            '''
            ...
    """

    def decorator(fn: ToolFunction) -> ToolFunction:
        built = build_tool(fn, description, name=name)
        _TOOLS[built.name] = built
        return fn

    return decorator


def get_tool(name: str) -> Tool:
    """Get a registered tool by name.

    Raises:
        KeyError: If tool not found
    """
    return _TOOLS[name]


def get_all_tools() -> dict[str, Tool]:
    """Get all registered tools."""
    return _TOOLS.copy()


def clear_tools() -> None:
    """Clear all registered tools. Used for testing."""
    _TOOLS.clear()


class ToolRegistry:
    """Name-to-tool lookup owned by one agent.

    The registry is read-only once built, so one instance can be shared by
    every session the agent serves.
    """

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for t in tools:
            self._tools[t.name] = t

    @classmethod
    def from_registered(cls, names: Iterable[str] | None = None) -> "ToolRegistry":
        """Build a registry from tools registered with ``@tool``.

        Args:
            names: Restrict to these tool names; all registered tools if None
        """
        if names is None:
            return cls(_TOOLS.values())
        return cls(_TOOLS[n] for n in names)

    def lookup(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def schemas(self) -> list[dict[str, Any]]:
        """Tool schemas in OpenAI function format."""
        return [t.schema.to_openai_format() for t in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
