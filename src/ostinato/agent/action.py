"""Action step: run the tool calls implied by the last reasoning turn."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ostinato.agent.feedback import FEEDBACK_TOOL_NAME, feedback_source
from ostinato.agent.trace import Route
from ostinato.llm.client import Message

if TYPE_CHECKING:
    from ostinato.agent.runtime import AgentRuntime
    from ostinato.agent.trace import Trace
    from ostinato.llm.client import ToolCall

logger = logging.getLogger(__name__)

NO_ACTION_PROMPT = "No valid Action detected. If you have enough info, please provide Final Answer."

# Where an Action block starts; the JSON object itself is decoded with
# raw_decode so nested "arguments" objects are kept whole.
ACTION_START = re.compile(r"Action:\s*(?:```json)?\s*(?=\{)")
# Span used to step over an Action whose JSON does not decode
ACTION_PATTERN = re.compile(r"Action:\s*(?:```json)?\s*(\{.*?\})\s*(?:```)?", re.DOTALL)

# ``Action: get_time``: a tool name alone on the rest of the line
BARE_ACTION = re.compile(r"Action:[ \t]*([^\n{]+)")

_decoder = json.JSONDecoder()


@dataclass
class TextAction:
    """One ``Action:`` block found in free text."""

    name: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def parse_text_actions(text: str | None) -> list[TextAction]:
    """Find every ``Action: {...}`` block in ``text``, in order.

    Blocks whose JSON cannot be decoded are returned with ``error`` set so
    the caller can report them without dropping the blocks that follow.
    """
    actions: list[TextAction] = []
    if not text:
        return actions

    pos = 0
    while True:
        match = ACTION_START.search(text, pos)
        if match is None:
            break
        start = match.end()
        try:
            obj, end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError as e:
            actions.append(TextAction(error=str(e)))
            fallback = ACTION_PATTERN.match(text, match.start())
            pos = fallback.end() if fallback else start + 1
            continue

        pos = end
        if not isinstance(obj, dict):
            actions.append(TextAction(error="Action must be a JSON object"))
            continue
        arguments = obj.get("arguments")
        actions.append(
            TextAction(
                name=str(obj.get("name") or ""),
                arguments=arguments if isinstance(arguments, dict) else {},
            )
        )
    return actions


class ActionStep:
    """Executes tools and feeds their observations back to the model.

    Native tool calls are answered one tool message per call. Text-protocol
    actions are answered with a single user message holding every
    ``Observation:`` line of the turn.
    """

    name = Route.ACTION

    def __init__(self, runtime: AgentRuntime):
        self.runtime = runtime

    async def run(self, trace: Trace) -> None:
        message = trace.last_reason_message
        if message is not None and message.tool_calls:
            await self._run_native(trace, message.tool_calls)
        else:
            await self._run_text(trace)

        if not trace.pending and not trace.is_finished:
            trace.set_route(Route.REASON)

    async def _run_native(self, trace: Trace, tool_calls: list[ToolCall]) -> None:
        open_ids = {call.id for call in trace.unanswered_tool_calls()}
        for call in tool_calls:
            if call.id not in open_ids:
                logger.debug("Session %s: tool call %s already answered", trace.session_id, call.id)
                continue

            result = await self._do_action(trace, call.name, dict(call.arguments or {}))
            if result is None:
                # A finished run leaves no call without a reply
                if trace.is_finished:
                    trace.close_tool_calls(trace.final_answer or "")
                return

            trace.append(
                Message(role="tool", content=result, tool_call_id=call.id, name=call.name)
            )

    async def _run_text(self, trace: Trace) -> None:
        actions = parse_text_actions(trace.last_answer)
        if not actions:
            actions = self._bare_action(trace)
        if not actions:
            trace.append(Message(role="user", content=NO_ACTION_PROMPT))
            return

        # Observations produced before a suspension are replayed, not re-run
        observations = trace.pending_observations
        for action in actions[len(observations) :]:
            if action.error is not None:
                observations.append(f"Observation: Error parsing Action JSON: {action.error}")
                continue

            result = await self._do_action(trace, action.name, action.arguments)
            if result is None:
                if trace.is_finished:
                    trace.pending_observations = []
                return
            observations.append(f"Observation: {result}")

        trace.append(Message(role="user", content="\n".join(observations)))
        trace.pending_observations = []

    def _bare_action(self, trace: Trace) -> list[TextAction]:
        """``Action: tool_name`` without JSON, accepted only for a known tool."""
        match = BARE_ACTION.search(trace.last_answer or "")
        if match is None:
            return []
        name = match.group(1).strip().strip("`")
        if not self.runtime.has_tool(trace, name):
            return []
        return [TextAction(name=name)]

    async def _do_action(self, trace: Trace, tool_name: str, args: dict[str, Any]) -> str | None:
        """Run one tool call through the interceptors.

        Returns the observation, or None when an interceptor suspended or
        ended the run.
        """
        interceptors = self.runtime.interceptors

        trace.last_observation = None
        await interceptors.emit("on_action", trace, tool_name, args)
        if trace.pending or trace.is_finished:
            return None

        if trace.last_observation:
            result = trace.last_observation
        else:
            result = await self._execute(trace, tool_name, args)
            if trace.is_finished:
                return None

        trace.last_observation = result
        await interceptors.emit("on_observation", trace, tool_name, result)
        if trace.pending or trace.is_finished:
            return None

        return trace.last_observation

    async def _execute(self, trace: Trace, tool_name: str, args: dict[str, Any]) -> str:
        runtime = self.runtime

        if runtime.config.feedback_mode and tool_name == FEEDBACK_TOOL_NAME:
            source = feedback_source(tool_name, args)
            if source is None:
                return "Error: feedback requires a non-empty 'source'."
            logger.info("Session %s: ended by feedback", trace.session_id)
            trace.finish(source)
            return source

        tool = runtime.lookup_tool(trace, tool_name)
        if tool is None:
            logger.warning("Session %s: tool not found: %s", trace.session_id, tool_name)
            return f"Tool [{tool_name}] not found."

        trace.tool_call_count += 1
        trace.metrics.tool_calls += 1
        logger.debug("Session %s: executing %s(%s)", trace.session_id, tool_name, args)
        try:
            return await tool.execute(**args)
        except Exception as e:
            logger.warning("Tool %s failed: %s", tool_name, e)
            return f"Error executing tool [{tool_name}]: {e}"
