"""Tests for LLM clients."""

import json

import pytest
import respx
from httpx import Response

from ostinato.config.schema import InferenceConfig, OpenAIConfig, OstinatoConfig
from ostinato.llm.client import Message, ToolCall
from ostinato.llm.factory import create_llm_client
from ostinato.llm.ollama import OllamaClient
from ostinato.llm.openai_compat import OpenAICompatibleClient

CHAT_URL = "http://localhost:11434/v1/chat/completions"


@pytest.fixture
def ollama_client():
    """Create an Ollama client for testing."""
    return OllamaClient(
        model="qwen2.5:7b",
        base_url="http://localhost:11434/v1",
        temperature=0.7,
    )


def _completion(message: dict, usage: dict | None = None, finish_reason: str = "stop") -> dict:
    body = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1677652288,
        "model": "qwen2.5:7b",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }
    if usage:
        body["usage"] = usage
    return body


@pytest.mark.asyncio
@respx.mock
async def test_complete_simple_response(ollama_client):
    """Test simple completion without tool calls."""
    respx.post(CHAT_URL).mock(
        return_value=Response(
            200,
            json=_completion(
                {"role": "assistant", "content": "Hello! How can I help you?"},
                usage={"prompt_tokens": 12, "completion_tokens": 7, "total_tokens": 19},
            ),
        )
    )

    response = await ollama_client.complete([Message(role="user", content="Hi")])

    assert response.content == "Hello! How can I help you?"
    assert response.tool_calls is None
    assert response.finish_reason == "stop"
    assert response.has_choices is True
    assert response.usage.prompt_tokens == 12
    assert response.usage.total_tokens == 19


@pytest.mark.asyncio
@respx.mock
async def test_complete_with_tool_calls(ollama_client):
    """Test completion with tool calls."""
    respx.post(CHAT_URL).mock(
        return_value=Response(
            200,
            json=_completion(
                {
                    "role": "assistant",
                    "content": "",
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {
                                "name": "get_weather",
                                "arguments": json.dumps({"city": "Rome"}),
                            },
                        }
                    ],
                },
                finish_reason="tool_calls",
            ),
        )
    )

    response = await ollama_client.complete([Message(role="user", content="Weather in Rome?")])

    assert response.tool_calls == [ToolCall(id="call_1", name="get_weather", arguments={"city": "Rome"})]
    assert response.finish_reason == "tool_calls"
    assert response.usage is None


@pytest.mark.asyncio
@respx.mock
async def test_malformed_tool_arguments_become_empty(ollama_client):
    respx.post(CHAT_URL).mock(
        return_value=Response(
            200,
            json=_completion(
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "get_time", "arguments": "{not json"},
                        }
                    ],
                }
            ),
        )
    )

    response = await ollama_client.complete([Message(role="user", content="Time?")])

    assert response.content == ""
    assert response.tool_calls[0].arguments == {}


@pytest.mark.asyncio
@respx.mock
async def test_no_choices(ollama_client):
    body = _completion({"role": "assistant", "content": "unused"})
    body["choices"] = []
    respx.post(CHAT_URL).mock(return_value=Response(200, json=body))

    response = await ollama_client.complete([Message(role="user", content="Hi")])

    assert response.has_choices is False
    assert response.content == ""


@pytest.mark.asyncio
@respx.mock
async def test_request_carries_tools_stop_and_limits(ollama_client):
    route = respx.post(CHAT_URL).mock(
        return_value=Response(200, json=_completion({"role": "assistant", "content": "ok"}))
    )
    tools = [{"type": "function", "function": {"name": "get_time", "parameters": {}}}]

    await ollama_client.complete(
        [Message(role="user", content="Hi")],
        tools=tools,
        temperature=0.1,
        max_tokens=64,
        stop=["Observation:"],
    )

    sent = json.loads(route.calls.last.request.content)
    assert sent["model"] == "qwen2.5:7b"
    assert sent["tools"] == tools
    assert sent["tool_choice"] == "auto"
    assert sent["stop"] == ["Observation:"]
    assert sent["temperature"] == 0.1
    assert sent["max_tokens"] == 64


@pytest.mark.asyncio
@respx.mock
async def test_request_omits_optional_params(ollama_client):
    route = respx.post(CHAT_URL).mock(
        return_value=Response(200, json=_completion({"role": "assistant", "content": "ok"}))
    )

    await ollama_client.complete([Message(role="user", content="Hi")])

    sent = json.loads(route.calls.last.request.content)
    assert "tools" not in sent
    assert "stop" not in sent
    assert "max_tokens" not in sent
    assert sent["temperature"] == 0.7


@pytest.mark.asyncio
@respx.mock
async def test_stream_complete_yields_deltas_then_response(ollama_client):
    chunks = [
        {"choices": [{"index": 0, "delta": {"role": "assistant", "content": "Final "}}]},
        {"choices": [{"index": 0, "delta": {"content": "Answer: 42"}, "finish_reason": "stop"}]},
        {
            "choices": [],
            "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
        },
    ]
    body = ""
    for chunk in chunks:
        chunk.update(
            {"id": "chatcmpl-1", "object": "chat.completion.chunk", "created": 1, "model": "m"}
        )
        body += f"data: {json.dumps(chunk)}\n\n"
    body += "data: [DONE]\n\n"
    respx.post(CHAT_URL).mock(
        return_value=Response(
            200, content=body.encode(), headers={"content-type": "text/event-stream"}
        )
    )

    received = [c async for c in ollama_client.stream_complete([Message(role="user", content="?")])]

    assert [c.delta for c in received[:-1]] == ["Final ", "Answer: 42"]
    final = received[-1].response
    assert final.content == "Final Answer: 42"
    assert final.usage.total_tokens == 7
    assert final.tool_calls is None


@pytest.mark.asyncio
@respx.mock
async def test_stream_complete_sends_max_tokens_and_stop(ollama_client):
    chunk = {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 1,
        "model": "m",
        "choices": [{"index": 0, "delta": {"content": "ok"}, "finish_reason": "stop"}],
    }
    route = respx.post(CHAT_URL).mock(
        return_value=Response(
            200,
            content=f"data: {json.dumps(chunk)}\n\ndata: [DONE]\n\n".encode(),
            headers={"content-type": "text/event-stream"},
        )
    )

    received = [
        c
        async for c in ollama_client.stream_complete(
            [Message(role="user", content="?")], max_tokens=32, stop=["Observation:"]
        )
    ]

    body = json.loads(route.calls.last.request.content)
    assert body["max_tokens"] == 32
    assert body["stop"] == ["Observation:"]
    assert body["stream"] is True
    assert received[-1].response.content == "ok"


def test_convert_messages(ollama_client):
    messages = [
        Message(role="system", content="sys"),
        Message(
            role="assistant",
            content="",
            tool_calls=[ToolCall(id="c1", name="get_weather", arguments={"city": "Zürich"})],
        ),
        Message(role="tool", content="sunny", tool_call_id="c1", name="get_weather"),
    ]

    converted = ollama_client._convert_messages(messages)

    assert converted[0] == {"role": "system", "content": "sys"}
    call = converted[1]["tool_calls"][0]
    assert call["function"]["name"] == "get_weather"
    assert json.loads(call["function"]["arguments"]) == {"city": "Zürich"}
    assert converted[2]["tool_call_id"] == "c1"
    assert converted[2]["name"] == "get_weather"


# -- Factory -----------------------------------------------------------------


def test_factory_default_is_ollama():
    client = create_llm_client(OstinatoConfig())

    assert isinstance(client, OllamaClient)
    assert client.model == "qwen2.5:7b"
    assert str(client.client.base_url).startswith("http://localhost:11434/v1")


def test_factory_openai_backend():
    config = OstinatoConfig(
        inference=InferenceConfig(
            backend="openai",
            openai=OpenAIConfig(base_url="http://localhost:8000/v1", api_key="secret"),
        )
    )

    client = create_llm_client(config)

    assert type(client) is OpenAICompatibleClient
    assert client.client.api_key == "secret"


def test_factory_unknown_backend():
    config = OstinatoConfig()
    config.inference.backend = "carrier-pigeon"

    with pytest.raises(ValueError, match="Unknown inference backend"):
        create_llm_client(config)
