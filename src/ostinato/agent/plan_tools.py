"""Plan-mutation tools the model can call while the loop is running.

Indices exposed to the model are 1-based; ``Trace.plan_index`` is 0-based.
Every mutation keeps ``0 <= plan_index <= len(plans)`` and fires ``on_plan``.
"""

from typing import Any

from ostinato.agent.interceptor import InterceptorPipeline
from ostinato.agent.plan import clean_plans
from ostinato.agent.trace import Trace
from ostinato.tools.base import Tool
from ostinato.tools.registry import build_tool

PLAN_TOOL_NAMES = ("create_plan", "update_task_progress", "revise_plan")


def _as_steps(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.splitlines()
    return [str(v) for v in value]


def _as_index(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class PlanTools:
    """Plan tools bound to one trace."""

    def __init__(self, trace: Trace, interceptors: InterceptorPipeline):
        self.trace = trace
        self.interceptors = interceptors

    async def _notify(self) -> None:
        await self.interceptors.emit("on_plan", self.trace, self.trace.last_reason_message)

    async def create_plan(self, steps: list[str]) -> str:
        """Create the execution plan.

        Args:
            steps: Ordered list of step descriptions, one action per step
        """
        cleaned = clean_plans(_as_steps(steps))
        self.trace.set_plans(cleaned)
        await self._notify()
        return f"Plan created with {len(cleaned)} steps. Start with step 1."

    async def update_task_progress(self, next_index: int) -> str:
        """Move the plan cursor.

        Args:
            next_index: 1-based index of the step to work on next
        """
        plans = self.trace.plans
        if not plans:
            return "Error: no plan is active. Continue the task directly."

        safe_index = _clamp(_as_index(next_index), 1, len(plans) + 1)
        self.trace.plan_index = safe_index - 1
        await self._notify()

        if safe_index <= len(plans):
            return f"Progress updated. Next is step {safe_index}: {plans[safe_index - 1]}"
        return "Progress updated. All plan steps are complete."

    async def revise_plan(self, new_steps: list[str], from_index: int) -> str:
        """Replace the remaining steps of the plan.

        Args:
            new_steps: Replacement steps
            from_index: 1-based index of the first step to replace
        """
        if not self.trace.plans:
            return "Error: no plan is active, nothing to revise."

        cleaned = clean_plans(_as_steps(new_steps))
        if not cleaned:
            return "No valid steps were provided. The plan is unchanged."

        start = _clamp(_as_index(from_index), 1, len(self.trace.plans) + 1)
        split_at = start - 1
        current_index = self.trace.plan_index

        self.trace.plans = self.trace.plans[:split_at] + cleaned
        # Revisions strictly ahead of current progress keep the cursor
        if split_at <= current_index:
            self.trace.plan_index = split_at
        await self._notify()

        return f"Plan revised from step {start}. Continue with the updated plan."

    def as_tools(self) -> list[Tool]:
        return [
            build_tool(
                self.create_plan,
                "Initialise the execution plan for a complex, multi-step task.",
            ),
            build_tool(
                self.update_task_progress,
                "Mark the current plan step done and move to the given step.",
            ),
            build_tool(
                self.revise_plan,
                "Replace the remaining plan steps when the current plan no longer fits.",
            ),
        ]
