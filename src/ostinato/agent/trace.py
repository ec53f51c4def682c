"""Per-session state of a ReAct run.

A ``Trace`` is the unit of suspension: every field the loop needs in order to
continue lives here, and the whole record round-trips through JSON so a run
suspended in one process can resume in another. ``route`` is the explicit
continuation: the controller reads nothing else to decide what runs next.
"""

import logging
from enum import StrEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from ostinato.llm.client import Message, ToolCall, Usage

logger = logging.getLogger(__name__)

SUPERSEDED_TOOL_REPLY = "Not executed: the request was replaced by a new one."


class Route(StrEnum):
    """Names of the steps a trace can route to."""

    PLAN = "plan"
    REASON = "reason"
    ACTION = "action"
    END = "end"


class Metrics(BaseModel):
    """Cumulative counters for one session."""

    llm_calls: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    tool_calls: int = 0
    duration_ms: int = 0

    def add_usage(self, usage: Usage | None) -> None:
        """Merge the usage of one model call."""
        self.llm_calls += 1
        if usage is None:
            return
        self.prompt_tokens += usage.prompt_tokens
        self.completion_tokens += usage.completion_tokens
        self.total_tokens += usage.total_tokens


class Trace(BaseModel):
    """Mutable, serializable state of one agent session."""

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    prompt: str | None = None
    messages: list[Message] = Field(default_factory=list)

    step_count: int = 0
    max_steps: int = 10
    tool_call_count: int = 0

    plans: list[str] = Field(default_factory=list)
    plan_index: int = 0

    route: str = Route.REASON
    final_answer: str | None = None

    pending: bool = False
    pending_reason: str | None = None

    last_response: str | None = None
    last_answer: str | None = None
    last_reason_message: Message | None = None
    last_observation: str | None = None
    pending_observations: list[str] = Field(default_factory=list)

    metrics: Metrics = Field(default_factory=Metrics)
    extras: dict[str, Any] = Field(default_factory=dict)

    # --- routing ---------------------------------------------------------

    def next_step(self) -> int:
        """Advance the step counter and return the new value."""
        self.step_count += 1
        logger.debug("Session %s proceeds to step %d", self.session_id, self.step_count)
        return self.step_count

    def set_route(self, route: str) -> None:
        if route != self.route:
            logger.debug("Session %s route: %s -> %s", self.session_id, self.route, route)
        self.route = route

    def finish(self, answer: str) -> None:
        """Route to END with a final answer.

        The first answer of a request wins; later calls only re-assert the
        END route.
        """
        if self.final_answer is None:
            self.final_answer = answer
        else:
            logger.debug("Session %s already has a final answer, keeping it", self.session_id)
        self.set_route(Route.END)

    @property
    def is_finished(self) -> bool:
        return self.route == Route.END

    # --- suspension ------------------------------------------------------

    def suspend(self, reason: str | None = None) -> None:
        """Ask the controller to stop scheduling steps for this trace."""
        self.pending = True
        self.pending_reason = reason
        logger.info("Session %s suspended: %s", self.session_id, reason)

    def clear_pending(self) -> None:
        self.pending = False
        self.pending_reason = None

    # --- conversation ----------------------------------------------------

    def begin_request(self, prompt: str, start_route: str = Route.REASON) -> None:
        """Start a new top-level request on this session.

        Per-request state is reset; the conversation history and the
        cumulative metrics are kept.
        """
        self.close_tool_calls(SUPERSEDED_TOOL_REPLY)
        self.prompt = prompt
        self.step_count = 0
        self.tool_call_count = 0
        self.plans = []
        self.plan_index = 0
        self.route = start_route
        self.final_answer = None
        self.last_response = None
        self.last_answer = None
        self.last_reason_message = None
        self.last_observation = None
        self.pending_observations = []
        self.extras.clear()
        self.clear_pending()
        self.append(Message(role="user", content=prompt))

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def unanswered_tool_calls(self) -> list[ToolCall]:
        """Calls of the latest assistant message that have no tool reply yet."""
        answered: set[str] = set()
        for message in reversed(self.messages):
            if message.role == "tool" and message.tool_call_id:
                answered.add(message.tool_call_id)
            elif message.role == "assistant":
                return [c for c in message.tool_calls or [] if c.id not in answered]
        return []

    def close_tool_calls(self, content: str) -> None:
        """Reply ``content`` to every call still waiting for a tool message.

        OpenAI-compatible servers reject a history in which a tool call has
        no matching tool message.
        """
        for call in self.unanswered_tool_calls():
            self.append(
                Message(role="tool", content=content, tool_call_id=call.id, name=call.name)
            )

    def add_usage(self, usage: Usage | None) -> None:
        self.metrics.add_usage(usage)

    # --- plans -----------------------------------------------------------

    def set_plans(self, plans: list[str]) -> None:
        """Replace the plan and move the cursor back to the first step."""
        self.plans = list(plans)
        self.plan_index = 0
        logger.debug("Session %s plan updated, %d steps", self.session_id, len(self.plans))

    def formatted_plans(self) -> str:
        """Numbered plan with the current step marked, for prompt injection."""
        lines = []
        for i, step in enumerate(self.plans):
            if i < self.plan_index:
                mark = "[x]"
            elif i == self.plan_index:
                mark = "[>]"
            else:
                mark = "[ ]"
            lines.append(f"{mark} {i + 1}. {step}")
        return "\n".join(lines)

    # --- serialization ---------------------------------------------------

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes | str) -> "Trace":
        return cls.model_validate_json(data)
