"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest

from ostinato.config.schema import AgentConfig, OstinatoConfig
from ostinato.llm.client import CompletionResponse, Message, StreamChunk
from ostinato.tools.base import Tool, ToolParameter, ToolSchema


class MockLLM:
    """Mock LLM client for testing.

    Items in ``responses`` are returned in order; an item that is an
    exception is raised instead.
    """

    def __init__(self, responses: list[CompletionResponse | Exception]):
        self.responses = list(responses)
        self.call_count = 0
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ) -> CompletionResponse:
        """Return next predefined response."""
        self.calls.append(
            {"messages": list(messages), "tools": tools, "max_tokens": max_tokens, "stop": stop}
        )

        item = self.responses[self.call_count]
        self.call_count += 1
        if isinstance(item, Exception):
            raise item
        return item

    async def stream_complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ):
        """Stream the next predefined response word by word."""
        response = await self.complete(
            messages, tools=tools, temperature=temperature, max_tokens=max_tokens, stop=stop
        )
        for word in response.content.split(" "):
            yield StreamChunk(delta=word + " ")
        yield StreamChunk(response=response)


@pytest.fixture
def mock_llm():
    """Factory for MockLLM instances."""
    return MockLLM


@pytest.fixture
def agent_config() -> AgentConfig:
    """Agent config without retry delays."""
    return AgentConfig(retry_delay_ms=0)


@pytest.fixture
def default_config() -> OstinatoConfig:
    """Provide a default configuration for tests."""
    return OstinatoConfig()


@pytest.fixture
def weather_tool() -> Tool:
    """Weather lookup tool that records its calls."""
    calls: list[str] = []

    async def get_weather(city: str) -> str:
        calls.append(city)
        return f"{city}: 25°C, sunny"

    tool = Tool(
        schema=ToolSchema(
            name="get_weather",
            description="Get the current weather",
            parameters=[ToolParameter(name="city", type="string", description="City name")],
        ),
        fn=get_weather,
    )
    tool.calls = calls  # type: ignore[attr-defined]
    return tool


@pytest.fixture
def time_tool() -> Tool:
    async def get_time() -> str:
        return "12:00"

    return Tool(
        schema=ToolSchema(name="get_time", description="Get the current time", parameters=[]),
        fn=get_time,
    )


@pytest.fixture
def failing_tool() -> Tool:
    async def explode() -> str:
        raise RuntimeError("boom")

    return Tool(
        schema=ToolSchema(name="explode", description="Always fails", parameters=[]),
        fn=explode,
    )
