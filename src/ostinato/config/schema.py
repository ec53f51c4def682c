"""Pydantic models for ostinato.yaml configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """LLM model configuration."""

    name: str = Field(default="qwen2.5:7b", description="Model name served by the backend")
    temperature: float = Field(default=0.7, description="Sampling temperature", ge=0.0, le=2.0)
    max_tokens: int | None = Field(
        default=None, description="Completion token limit per model call", ge=1
    )


class OllamaConfig(BaseModel):
    """Ollama server configuration."""

    host: str = Field(default="http://localhost:11434", description="Ollama server URL")
    timeout: int = Field(default=120, description="Request timeout in seconds", ge=1)


class OpenAIConfig(BaseModel):
    """Any OpenAI-compatible endpoint (OpenAI, vLLM, SGLang, llama.cpp)."""

    base_url: str = Field(default="https://api.openai.com/v1", description="Endpoint incl. /v1")
    api_key: str | None = Field(default=None, description="API key, if the server requires one")
    timeout: int = Field(default=120, description="Request timeout in seconds", ge=1)


class InferenceConfig(BaseModel):
    """Inference backend configuration."""

    backend: Literal["ollama", "openai"] = Field(
        default="ollama",
        description="Inference backend to use",
    )
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)


class AgentConfig(BaseModel):
    """ReAct loop configuration."""

    name: str = Field(default="ostinato", description="Agent name used in logs")
    max_steps: int = Field(default=10, description="Maximum reasoning steps per request", ge=1)
    max_retries: int = Field(default=3, description="Model call attempts before giving up", ge=1)
    retry_delay_ms: int = Field(
        default=1000,
        description="Linear backoff unit; attempt N waits N * retry_delay_ms",
        ge=0,
    )
    finish_marker: str = Field(
        default="Final Answer:",
        description="Marker in model output that signals the final answer",
        min_length=1,
    )
    planning_mode: bool = Field(
        default=False, description="Decompose the goal into a plan before reasoning"
    )
    feedback_mode: bool = Field(
        default=False, description="Offer the model a feedback tool that ends the run early"
    )
    locale: Literal["en", "zh"] = Field(default="en", description="Prompt language")
    style: Literal["react", "native_tool"] = Field(
        default="react",
        description="'react' asks for Thought/Action text, 'native_tool' relies on function calling",
    )
    role: str | None = Field(default=None, description="Role description for the system prompt")
    instruction: str | None = Field(
        default=None, description="Business instructions appended to the system prompt"
    )
    planning_instruction: str | None = Field(
        default=None, description="Override for the built-in planning instruction"
    )
    streaming: bool = Field(default=False, description="Stream model output to the console")
    sensitive_tools: list[str] = Field(
        default_factory=list, description="Tools that suspend the run until a reviewer decides"
    )
    tool_modules: list[str] = Field(
        default_factory=list, description="Modules imported at startup to register @tool functions"
    )


class SessionsConfig(BaseModel):
    """Trace persistence configuration."""

    enabled: bool = Field(default=True, description="Persist traces between invocations")
    db_path: str = Field(
        default=str(Path.home() / ".ostinato" / "sessions.db"),
        description="SQLite database holding serialized traces",
    )


class OstinatoConfig(BaseModel):
    """Root configuration model."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
