"""Tests for tool registration and schema generation."""

import pytest

from ostinato.tools.base import Tool, ToolParameter, ToolSchema
from ostinato.tools.registry import (
    ToolRegistry,
    build_tool,
    clear_tools,
    get_all_tools,
    get_tool,
    tool,
)


@pytest.fixture(autouse=True)
def cleanup_registry():
    """Clear tool registry before and after each test."""
    clear_tools()
    yield
    clear_tools()


def test_tool_schema_to_openai_format():
    schema = ToolSchema(
        name="test_tool",
        description="A test tool",
        parameters=[
            ToolParameter(name="arg1", type="string", description="First arg", required=True),
            ToolParameter(name="arg2", type="integer", description="Second arg", required=False),
            ToolParameter(name="tags", type="array", description="Tags"),
        ],
    )

    openai_format = schema.to_openai_format()

    assert openai_format["type"] == "function"
    assert openai_format["function"]["name"] == "test_tool"
    properties = openai_format["function"]["parameters"]["properties"]
    assert set(properties) == {"arg1", "arg2", "tags"}
    assert properties["tags"]["items"] == {"type": "string"}
    assert openai_format["function"]["parameters"]["required"] == ["arg1", "tags"]


def test_schema_describe():
    schema = ToolSchema(
        name="search",
        description="Search the web",
        parameters=[
            ToolParameter(name="query", type="string", description="Query"),
            ToolParameter(name="limit", type="integer", description="Limit", required=False),
        ],
    )

    assert schema.describe() == "search(query: string, limit: integer (optional)): Search the web"


def test_tool_decorator_registration():
    """Test that @tool decorator registers the function."""

    @tool(description="Test function")
    async def test_func(arg1: str) -> str:
        """Test function.

        Args:
            arg1: First argument
        """
        return f"Result: {arg1}"

    registered = get_tool("test_func")
    assert registered.schema.description == "Test function"
    assert registered.schema.parameters[0].name == "arg1"
    assert registered.schema.parameters[0].description == "First argument"
    assert "test_func" in get_all_tools()


def test_type_inference():
    async def typed(
        text: str,
        count: int,
        ratio: float,
        flag: bool,
        items: list[str],
        meta: dict,
        maybe: int | None = None,
    ) -> str:
        return ""

    built = build_tool(typed, "Typed tool")

    types = {p.name: p.type for p in built.schema.parameters}
    assert types == {
        "text": "string",
        "count": "integer",
        "ratio": "number",
        "flag": "boolean",
        "items": "array",
        "meta": "object",
        "maybe": "integer",
    }
    required = {p.name: p.required for p in built.schema.parameters}
    assert required["maybe"] is False
    assert required["text"] is True



def test_list_element_type_becomes_items():
    async def scores(values: list[int], labels: list[str] | None = None, raw: list = None) -> str:
        return ""

    properties = build_tool(scores, "Scores").schema.to_openai_format()["function"][
        "parameters"
    ]["properties"]

    assert properties["values"]["items"] == {"type": "integer"}
    assert properties["labels"]["items"] == {"type": "string"}
    assert properties["raw"]["items"] == {"type": "string"}

def test_custom_tool_name():
    @tool(description="Renamed", name="lookup")
    async def _impl(key: str) -> str:
        return key

    assert get_tool("lookup").name == "lookup"


@pytest.mark.asyncio
async def test_execute_coerces_result_to_string():
    async def answer() -> int:
        return 42

    built = Tool(schema=ToolSchema(name="answer", description="", parameters=[]), fn=answer)

    assert await built.execute() == "42"


def test_registry_lookup_and_from_registered():
    @tool(description="One")
    async def one() -> str:
        return "1"

    @tool(description="Two")
    async def two() -> str:
        return "2"

    registry = ToolRegistry.from_registered(["one"])

    assert "one" in registry
    assert "two" not in registry
    assert registry.lookup("two") is None
    assert len(ToolRegistry.from_registered()) == 2
    assert registry.schemas()[0]["function"]["name"] == "one"
