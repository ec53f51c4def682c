"""LLM client protocol and data types."""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class ToolCall:
    """A tool call requested by the LLM."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class Message:
    """A message in the conversation."""

    role: str  # "system", "user", "assistant", "tool"
    content: str
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None  # For tool response messages
    name: str | None = None  # Tool name for tool response messages


@dataclass
class Usage:
    """Token usage reported for a single model call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionResponse:
    """Response from LLM completion."""

    content: str
    tool_calls: list[ToolCall] | None = None
    finish_reason: str = "stop"
    usage: Usage | None = None
    has_choices: bool = True


@dataclass
class StreamChunk:
    """One piece of a streamed completion.

    Intermediate chunks carry a content ``delta``. The last chunk of every
    stream carries the aggregated ``response``. A chunk with ``reset`` set
    means the attempt that produced the deltas so far failed; they should be
    discarded, as the output is retried from the start.
    """

    delta: str = ""
    response: CompletionResponse | None = None
    reset: bool = False


ChunkCallback = Callable[[StreamChunk], Awaitable[None] | None]


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ) -> CompletionResponse:
        """Generate a completion from the LLM.

        Args:
            messages: Conversation history
            tools: Available tools in OpenAI function format
            temperature: Sampling temperature override
            max_tokens: Maximum tokens to generate
            stop: Stop sequences

        Returns:
            CompletionResponse with content and optional tool calls
        """
        ...

    def stream_complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream a completion from the LLM.

        Args:
            messages: Conversation history
            tools: Available tools in OpenAI function format
            temperature: Sampling temperature override
            max_tokens: Maximum tokens to generate
            stop: Stop sequences

        Yields:
            Content chunks as they arrive, then one chunk holding the
            aggregated response
        """
        ...
