"""Base client for OpenAI-compatible inference servers."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ostinato.llm.client import CompletionResponse, Message, StreamChunk, ToolCall, Usage

logger = logging.getLogger(__name__)


def _loads_arguments(raw: str | None) -> dict[str, Any]:
    """Decode a tool-call argument string, tolerating empty or broken JSON."""
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Discarding malformed tool arguments %r: %s", raw[:200], e)
        return {}
    return args if isinstance(args, dict) else {}


class OpenAICompatibleClient:
    """Base LLM client for any OpenAI-compatible inference server.

    OpenAI, vLLM, SGLang, Ollama and llama.cpp all expose OpenAI-compatible
    ``/v1/chat/completions`` endpoints. This class encapsulates the shared
    request/response logic so that backend-specific subclasses only need to
    supply config defaults.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        api_key: str = "none",
        timeout: int = 120,
        temperature: float = 0.7,
    ) -> None:
        """Initialise the client.

        Args:
            model: Model name served by the backend.
            base_url: OpenAI-compatible endpoint (must include ``/v1``).
            api_key: API key (many backends ignore this but the SDK requires one).
            timeout: Request timeout in seconds.
            temperature: Default sampling temperature.
        """
        self.model = model
        self.temperature = temperature
        self.client = AsyncOpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert internal Message format to OpenAI format."""
        openai_messages: list[dict[str, Any]] = []

        for msg in messages:
            message_dict: dict[str, Any] = {
                "role": msg.role,
                "content": msg.content,
            }

            if msg.tool_calls:
                message_dict["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": json.dumps(tc.arguments, ensure_ascii=False),
                        },
                    }
                    for tc in msg.tool_calls
                ]

            if msg.tool_call_id:
                message_dict["tool_call_id"] = msg.tool_call_id
            if msg.name and msg.role == "tool":
                message_dict["name"] = msg.name

            openai_messages.append(message_dict)

        return openai_messages

    def _parse_tool_calls(self, tool_calls: Any) -> list[ToolCall]:
        """Parse tool calls from an OpenAI-compatible response."""
        if not tool_calls:
            return []

        return [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=_loads_arguments(tc.function.arguments),
            )
            for tc in tool_calls
        ]

    @staticmethod
    def _parse_usage(usage: Any) -> Usage | None:
        if usage is None:
            return None
        return Usage(
            prompt_tokens=usage.prompt_tokens or 0,
            completion_tokens=usage.completion_tokens or 0,
            total_tokens=usage.total_tokens or 0,
        )

    def _build_params(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None,
        temperature: float | None,
        max_tokens: int | None,
        stop: list[str] | None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "temperature": temperature if temperature is not None else self.temperature,
        }

        if tools:
            params["tools"] = tools
            params["tool_choice"] = "auto"

        if max_tokens:
            params["max_tokens"] = max_tokens

        if stop:
            params["stop"] = stop

        return params

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ) -> CompletionResponse:
        """Generate a completion.

        Args:
            messages: Conversation history.
            tools: Available tools in OpenAI function format.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens to generate.
            stop: Stop sequences.

        Returns:
            CompletionResponse with content and optional tool calls.
        """
        params = self._build_params(messages, tools, temperature, max_tokens, stop)

        response = await self.client.chat.completions.create(**params)
        usage = self._parse_usage(response.usage)

        if not response.choices:
            return CompletionResponse(content="", usage=usage, has_choices=False)

        choice = response.choices[0]
        message = choice.message

        tool_calls = self._parse_tool_calls(message.tool_calls)

        return CompletionResponse(
            content=message.content or "",
            tool_calls=tool_calls if tool_calls else None,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
        )

    async def stream_complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: list[str] | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream a completion.

        Tool-call fragments are accumulated by index and only surface in the
        final aggregated response.

        Args:
            messages: Conversation history.
            tools: Available tools in OpenAI function format.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens to generate.
            stop: Stop sequences.

        Yields:
            Content deltas, then one chunk carrying the aggregated response.
        """
        params = self._build_params(messages, tools, temperature, max_tokens, stop)
        params["stream"] = True
        params["stream_options"] = {"include_usage": True}

        stream = await self.client.chat.completions.create(**params)

        content_parts: list[str] = []
        partial_calls: dict[int, dict[str, str]] = {}
        finish_reason = "stop"
        usage: Usage | None = None
        saw_choice = False

        async for chunk in stream:
            if chunk.usage is not None:
                usage = self._parse_usage(chunk.usage)
            if not chunk.choices:
                continue

            saw_choice = True
            choice = chunk.choices[0]
            if choice.finish_reason:
                finish_reason = choice.finish_reason

            delta = choice.delta
            for tc in delta.tool_calls or []:
                slot = partial_calls.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
                if tc.id:
                    slot["id"] = tc.id
                if tc.function is not None:
                    slot["name"] += tc.function.name or ""
                    slot["arguments"] += tc.function.arguments or ""

            if delta.content:
                content_parts.append(delta.content)
                yield StreamChunk(delta=delta.content)

        tool_calls = [
            ToolCall(id=slot["id"], name=slot["name"], arguments=_loads_arguments(slot["arguments"]))
            for _, slot in sorted(partial_calls.items())
        ]

        yield StreamChunk(
            response=CompletionResponse(
                content="".join(content_parts),
                tool_calls=tool_calls or None,
                finish_reason=finish_reason,
                usage=usage,
                has_choices=saw_choice,
            )
        )
