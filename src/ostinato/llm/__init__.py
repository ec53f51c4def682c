"""LLM client implementations."""

from .client import (
    ChunkCallback,
    CompletionResponse,
    LLMClient,
    Message,
    StreamChunk,
    ToolCall,
    Usage,
)
from .factory import create_llm_client
from .ollama import OllamaClient
from .openai_compat import OpenAICompatibleClient

__all__ = [
    "ChunkCallback",
    "CompletionResponse",
    "LLMClient",
    "Message",
    "OllamaClient",
    "OpenAICompatibleClient",
    "StreamChunk",
    "ToolCall",
    "Usage",
    "create_llm_client",
]
