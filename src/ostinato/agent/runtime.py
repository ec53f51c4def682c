"""Services shared by the loop steps of one agent.

``AgentRuntime`` bundles the model client, tools, interceptors and prompt
provider, and implements the two operations several steps need: calling the
model with retry and resolving a tool name for a given trace.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any

from ostinato.agent.errors import ModelCallError
from ostinato.agent.feedback import FEEDBACK_TOOL_NAME, feedback_schema
from ostinato.agent.interceptor import InterceptorPipeline
from ostinato.agent.plan_tools import PlanTools
from ostinato.agent.prompts import SystemPromptProvider, create_prompt_provider
from ostinato.agent.trace import Trace
from ostinato.config.schema import AgentConfig
from ostinato.llm.client import (
    ChunkCallback,
    CompletionResponse,
    LLMClient,
    Message,
    StreamChunk,
)
from ostinato.tools.base import Tool, ToolSchema
from ostinato.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

OBSERVATION_STOP = "Observation:"


@dataclass
class AgentRuntime:
    """Read-only services for every session an agent serves."""

    llm: LLMClient
    config: AgentConfig = field(default_factory=AgentConfig)
    tools: ToolRegistry = field(default_factory=ToolRegistry)
    interceptors: InterceptorPipeline = field(default_factory=InterceptorPipeline)
    prompts: SystemPromptProvider | None = None
    on_chunk: ChunkCallback | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        if self.prompts is None:
            self.prompts = create_prompt_provider(self.config)

    # --- tools -----------------------------------------------------------

    def session_tools(self, trace: Trace) -> list[Tool]:
        """Tools that exist only in the context of ``trace``."""
        if self.config.planning_mode:
            return PlanTools(trace, self.interceptors).as_tools()
        return []

    def tool_schemas(self, trace: Trace) -> list[ToolSchema]:
        """Everything the model may call on its next turn."""
        schemas = [t.schema for t in self.tools.tools()]
        schemas.extend(t.schema for t in self.session_tools(trace))
        if self.config.feedback_mode:
            schemas.append(feedback_schema(self.config.locale))
        return schemas

    def lookup_tool(self, trace: Trace, name: str) -> Tool | None:
        """Resolve ``name``: session tools first, then the registry."""
        for candidate in self.session_tools(trace):
            if candidate.name == name:
                return candidate
        return self.tools.lookup(name)

    def has_tool(self, trace: Trace, name: str) -> bool:
        """Whether the model may call ``name`` on this trace."""
        if self.config.feedback_mode and name == FEEDBACK_TOOL_NAME:
            return True
        return self.lookup_tool(trace, name) is not None

    # --- model -----------------------------------------------------------

    async def call_model(
        self,
        trace: Trace,
        messages: list[Message],
        tools: list[ToolSchema] | None = None,
    ) -> CompletionResponse:
        """Call the model with retry and linear backoff.

        Up to ``max_retries`` attempts are made. After failed attempt *n*
        (1-based) the call sleeps ``retry_delay_ms * n`` before trying again.
        ``on_model_start`` fires once before the first attempt and
        ``on_model_end`` once after the successful one; usage is merged into
        the trace metrics.

        Raises:
            ModelCallError: If every attempt failed
        """
        openai_tools = [t.to_openai_format() for t in tools] if tools else None
        stop = [OBSERVATION_STOP] if tools else None

        await self.interceptors.emit("on_model_start", trace, messages)

        max_retries = self.config.max_retries
        last_error: Exception | None = None
        response: CompletionResponse | None = None

        for attempt in range(1, max_retries + 1):
            try:
                response = await self._call_once(messages, openai_tools, stop)
                break
            except Exception as e:
                last_error = e
                if attempt == max_retries:
                    break
                delay = self.config.retry_delay_ms * attempt / 1000
                logger.debug(
                    "Agent [%s] model call failed (attempt %d/%d), retrying in %.2fs: %s",
                    self.config.name,
                    attempt,
                    max_retries,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

        if response is None:
            logger.error(
                "Agent [%s] model call failed after %d attempts", self.config.name, max_retries
            )
            raise ModelCallError(
                f"Model call failed after {max_retries} attempts: {last_error}",
                attempts=max_retries,
                context={"session_id": trace.session_id},
            ) from last_error

        trace.add_usage(response.usage)
        await self.interceptors.emit("on_model_end", trace, response)
        return response

    async def _call_once(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None,
        stop: list[str] | None,
    ) -> CompletionResponse:
        if self.on_chunk is None:
            return await self.llm.complete(
                messages=messages,
                tools=tools,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stop=stop,
            )

        final: CompletionResponse | None = None
        delivered = False
        try:
            async for chunk in self.llm.stream_complete(
                messages=messages,
                tools=tools,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stop=stop,
            ):
                await self._deliver(chunk)
                delivered = delivered or bool(chunk.delta)
                if chunk.response is not None:
                    final = chunk.response
        except Exception:
            # Tell the consumer to discard the partial output before a retry
            if delivered:
                await self._deliver(StreamChunk(reset=True))
            raise

        if final is None:
            return CompletionResponse(content="", has_choices=False)
        return final

    async def _deliver(self, chunk: StreamChunk) -> None:
        result = self.on_chunk(chunk)
        if inspect.isawaitable(result):
            await result
