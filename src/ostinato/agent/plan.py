"""Planning step: decompose the user's goal into an ordered plan."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ostinato.agent.feedback import feedback_schema, find_feedback
from ostinato.agent.trace import Route
from ostinato.llm.client import Message

if TYPE_CHECKING:
    from ostinato.agent.runtime import AgentRuntime
    from ostinato.agent.trace import Trace

logger = logging.getLogger(__name__)

# Numbering, bullets and markdown emphasis the model tends to prefix steps with
PLAN_LINE_PREFIX = re.compile(r"^[\d\.\-\s*]+")


def clean_plan_line(line: str) -> str:
    """Strip list numbering and markdown decoration from one plan line."""
    line = PLAN_LINE_PREFIX.sub("", line)
    line = line.replace("**", "").replace("`", "")
    return line.strip()


def clean_plans(lines: Iterable[str]) -> list[str]:
    """Clean every line and drop the ones left empty.

    >>> clean_plans(["1. Search", "", "  - **Summarize**"])
    ['Search', 'Summarize']
    """
    cleaned = (clean_plan_line(line) for line in lines)
    return [line for line in cleaned if line]


class PlanStep:
    """Asks the model for a plan once, before the reasoning loop starts."""

    name = Route.PLAN

    def __init__(self, runtime: AgentRuntime):
        self.runtime = runtime

    async def run(self, trace: Trace) -> None:
        runtime = self.runtime
        config = runtime.config

        if not config.planning_mode:
            trace.set_route(Route.REASON)
            return

        prompts = runtime.prompts
        messages = [
            Message(role="system", content=prompts.planning_instruction()),
            Message(role="user", content=f"{prompts.goal_label()}{trace.prompt or ''}"),
        ]
        tools = [feedback_schema(config.locale)] if config.feedback_mode else None

        response = await runtime.call_model(trace, messages, tools=tools)
        content = response.content or ""

        await runtime.interceptors.emit(
            "on_plan",
            trace,
            Message(role="assistant", content=content, tool_calls=response.tool_calls),
        )

        if trace.pending:
            return

        source = find_feedback(response.tool_calls)
        if source is not None:
            trace.finish(source)
            return

        if not content.strip():
            logger.warning("Session %s: planner returned no content", trace.session_id)
        else:
            trace.set_plans(clean_plans(content.splitlines()))
            logger.info(
                "Session %s: plan created with %d steps", trace.session_id, len(trace.plans)
            )

        if not trace.is_finished:
            trace.set_route(Route.REASON)
