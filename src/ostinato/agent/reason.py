"""Reasoning step: one model turn of the ReAct loop."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ostinato.agent.trace import Route
from ostinato.llm.client import Message

if TYPE_CHECKING:
    from ostinato.agent.runtime import AgentRuntime
    from ostinato.agent.trace import Trace

logger = logging.getLogger(__name__)

MAX_STEPS_ANSWER = "Agent error: Maximum iterations reached."
EMPTY_RESPONSE_PROMPT = (
    "Your last response was empty. If you need more info, use a tool. "
    "Otherwise, provide Final Answer."
)

OBSERVATION_LABEL = "Observation:"
ACTION_LABEL = "Action:"

THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)
REACT_LABELS = re.compile(r"^(Thought|Action|Observation):\s*", re.MULTILINE)


def strip_think(text: str) -> str:
    """Remove ``<think>...</think>`` blocks emitted by reasoning models."""
    return THINK_BLOCK.sub("", text).strip()


def truncate_observation(text: str) -> str:
    """Cut ``text`` at the first ``Observation:`` the model wrote itself."""
    head, _, _ = text.partition(OBSERVATION_LABEL)
    return head


def extract_final_answer(text: str | None, finish_marker: str) -> str:
    """Turn a finishing model turn into the user-facing answer.

    Keeps whatever follows ``finish_marker`` (when present), then drops think
    blocks and line-leading ReAct labels.
    """
    if not text:
        return ""
    if finish_marker and finish_marker in text:
        text = text[text.index(finish_marker) + len(finish_marker) :]
    text = THINK_BLOCK.sub("", text)
    text = REACT_LABELS.sub("", text)
    return text.strip()


class ReasonStep:
    """Calls the model once and decides where the loop goes next.

    Structured tool calls route to ``action``. Free text is routed by the
    finish marker first and ``Action:`` second; anything else is taken as the
    answer.
    """

    name = Route.REASON

    def __init__(self, runtime: AgentRuntime):
        self.runtime = runtime

    async def run(self, trace: Trace) -> None:
        runtime = self.runtime
        config = runtime.config

        step = trace.next_step()
        if step > trace.max_steps:
            logger.warning(
                "Session %s: maximum steps (%d) reached", trace.session_id, trace.max_steps
            )
            trace.finish(MAX_STEPS_ANSWER)
            return

        tools = runtime.tool_schemas(trace)
        system_prompt = runtime.prompts.system_prompt(trace, tools)
        messages = [Message(role="system", content=system_prompt), *trace.messages]

        response = await runtime.call_model(trace, messages, tools=tools or None)

        if trace.pending:
            return

        if not response.has_choices or (not response.content and not response.tool_calls):
            logger.debug("Session %s: empty model turn at step %d", trace.session_id, step)
            trace.append(Message(role="user", content=EMPTY_RESPONSE_PROMPT))
            trace.set_route(Route.REASON)
            return

        if response.tool_calls:
            message = Message(
                role="assistant",
                content=response.content or "",
                tool_calls=response.tool_calls,
            )
            trace.append(message)
            trace.last_reason_message = message
            trace.last_response = message.content
            trace.last_answer = strip_think(message.content)
            trace.set_route(Route.ACTION)
            return

        raw = truncate_observation(response.content or "")
        message = Message(role="assistant", content=raw)
        trace.append(message)
        trace.last_reason_message = message
        trace.last_response = raw
        trace.last_answer = strip_think(raw)

        await runtime.interceptors.emit("on_thought", trace, trace.last_answer)

        if trace.pending or trace.is_finished:
            return

        if config.finish_marker and config.finish_marker in raw:
            trace.finish(extract_final_answer(trace.last_answer, config.finish_marker))
        elif ACTION_LABEL in raw:
            trace.set_route(Route.ACTION)
        else:
            trace.finish(extract_final_answer(trace.last_answer, config.finish_marker))
