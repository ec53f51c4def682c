"""ReAct agent: wires model, tools, interceptors and storage to the loop."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ostinato.agent.action import ActionStep
from ostinato.agent.controller import Controller
from ostinato.agent.errors import TraceNotFoundError
from ostinato.agent.interceptor import InterceptorPipeline
from ostinato.agent.plan import PlanStep
from ostinato.agent.reason import ReasonStep
from ostinato.agent.runtime import AgentRuntime
from ostinato.agent.trace import Route, Trace
from ostinato.config.schema import AgentConfig
from ostinato.llm.factory import create_llm_client
from ostinato.tools.base import Tool
from ostinato.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from ostinato.agent.prompts import SystemPromptProvider
    from ostinato.config.schema import OstinatoConfig
    from ostinato.llm.client import ChunkCallback, LLMClient
    from ostinato.sessions.storage import TraceStore

logger = logging.getLogger(__name__)


class ReActAgent:
    """ReAct agent with planning, interceptors and resumable sessions."""

    def __init__(
        self,
        llm: LLMClient,
        tools: ToolRegistry | Iterable[Tool] = (),
        config: AgentConfig | None = None,
        interceptors: Iterable[Any] = (),
        store: TraceStore | None = None,
        prompts: SystemPromptProvider | None = None,
        on_chunk: ChunkCallback | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ):
        """Initialize the agent.

        Args:
            llm: LLM client for generating responses
            tools: Registry or list of tools available to the model
            config: Loop settings; defaults to ``AgentConfig()``
            interceptors: Interceptors, invoked in the given order
            store: Where traces are persisted after every call. None keeps
                   sessions in memory only.
            prompts: System prompt provider; picked from ``config.locale``
                     when None
            on_chunk: Receives streamed model output. Streaming is used only
                      when this is set.
            temperature: Sampling temperature passed to every model call
            max_tokens: Completion limit passed to every model call
        """
        if not isinstance(tools, ToolRegistry):
            tools = ToolRegistry(tools)

        self.config = config or AgentConfig()
        self.interceptors = InterceptorPipeline(interceptors)
        self.store = store
        self.runtime = AgentRuntime(
            llm=llm,
            config=self.config,
            tools=tools,
            interceptors=self.interceptors,
            prompts=prompts,
            on_chunk=on_chunk,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self.controller = Controller(
            [PlanStep(self.runtime), ReasonStep(self.runtime), ActionStep(self.runtime)],
            interceptors=self.interceptors,
        )
        self._sessions: dict[str, Trace] = {}

    @classmethod
    def from_config(
        cls,
        config: OstinatoConfig,
        tools: ToolRegistry | Iterable[Tool] = (),
        interceptors: Iterable[Any] = (),
        on_chunk: ChunkCallback | None = None,
    ) -> ReActAgent:
        """Build an agent, its LLM client and its trace store from config."""
        from ostinato.sessions.storage import TraceStore

        store = TraceStore(config.sessions.db_path) if config.sessions.enabled else None
        return cls(
            llm=create_llm_client(config),
            tools=tools,
            config=config.agent,
            interceptors=interceptors,
            store=store,
            on_chunk=on_chunk,
            max_tokens=config.model.max_tokens,
        )

    # --- sessions --------------------------------------------------------

    def new_trace(self, session_id: str | None = None) -> Trace:
        trace = Trace(max_steps=self.config.max_steps)
        if session_id:
            trace.session_id = session_id
        return trace

    def get_trace(self, session_id: str) -> Trace | None:
        """Return the live or stored trace for ``session_id``."""
        trace = self._sessions.get(session_id)
        if trace is None and self.store is not None:
            trace = self.store.load(session_id)
        return trace

    # --- entry points ----------------------------------------------------

    async def call(self, prompt: str | None, trace: Trace) -> Trace:
        """Advance ``trace`` until it ends or is suspended.

        A ``prompt`` starts a new request on the session; None resumes the
        request that was suspended.
        """
        if prompt is not None:
            start = Route.PLAN if self.config.planning_mode else Route.REASON
            trace.begin_request(prompt, start)
        else:
            trace.clear_pending()
        trace.max_steps = self.config.max_steps
        self._sessions[trace.session_id] = trace

        logger.info(
            "Agent [%s] %s session %s at route '%s'",
            self.config.name,
            "starting" if prompt is not None else "resuming",
            trace.session_id,
            trace.route,
        )

        await self.interceptors.emit("on_agent_start", trace)
        started = time.perf_counter()
        try:
            await self.controller.run(trace)
        finally:
            trace.metrics.duration_ms += int((time.perf_counter() - started) * 1000)
            if self.store is not None:
                self.store.save(trace)
        await self.interceptors.emit("on_agent_end", trace)

        if trace.pending:
            logger.info("Agent [%s] session %s suspended", self.config.name, trace.session_id)
        return trace

    async def run(self, user_message: str, session_id: str | None = None) -> str:
        """Run the agent on a user message.

        Args:
            user_message: User's input message
            session_id: Continue this session's conversation; a new session
                        is created when None or unknown

        Returns:
            The final answer, or the suspension reason if the run was
            suspended
        """
        trace = self.get_trace(session_id) if session_id else None
        if trace is None:
            trace = self.new_trace(session_id)
        await self.call(user_message, trace)
        return self.answer_of(trace)

    async def resume(self, session_id: str) -> str:
        """Continue a suspended session from where it stopped.

        Raises:
            TraceNotFoundError: If the session is unknown
        """
        trace = self.get_trace(session_id)
        if trace is None:
            raise TraceNotFoundError(
                f"No session found: {session_id}", context={"session_id": session_id}
            )
        await self.call(None, trace)
        return self.answer_of(trace)

    @staticmethod
    def answer_of(trace: Trace) -> str:
        if trace.pending:
            return trace.pending_reason or ""
        return trace.final_answer or ""
