"""
Human-in-the-loop gate for sensitive tools.

The first time a gated tool is about to run, the interceptor suspends the
trace and records what was intercepted. A decision is then attached to the
trace from outside (``HITLInterceptor.submit``) and the session is resumed;
on the second pass the decision is applied and removed.
"""

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from ostinato.agent.interceptor import Interceptor
from ostinato.agent.trace import Trace

logger = logging.getLogger(__name__)

DECISION_PREFIX = "hitl_decision:"
LAST_INTERVENED = "hitl_last_intervened"

DEFAULT_SENSITIVE_COMMENT = "Sensitive operation requires human approval."
DEFAULT_SKIP_COMMENT = "Operation skipped by reviewer. Continue with the next step."
DEFAULT_REJECT_COMMENT = "Operation rejected by reviewer."

# Returns the reason for intervening, or None to let the call through
InterventionStrategy = Callable[[Trace, dict[str, Any]], str | None]


class DecisionAction(StrEnum):
    """What the reviewer decided."""

    APPROVE = "approve"
    SKIP = "skip"
    REJECT = "reject"


class HITLDecision(BaseModel):
    """A reviewer's decision for one gated tool."""

    action: DecisionAction
    comment: str | None = None
    modified_args: dict[str, Any] | None = None

    @classmethod
    def approve(
        cls, comment: str | None = None, modified_args: dict[str, Any] | None = None
    ) -> "HITLDecision":
        return cls(action=DecisionAction.APPROVE, comment=comment, modified_args=modified_args)

    @classmethod
    def skip(cls, comment: str | None = None) -> "HITLDecision":
        return cls(action=DecisionAction.SKIP, comment=comment)

    @classmethod
    def reject(cls, comment: str | None = None) -> "HITLDecision":
        return cls(action=DecisionAction.REJECT, comment=comment)

    def comment_or(self, default: str) -> str:
        return self.comment if self.comment else default


class HITLTask(BaseModel):
    """The call that was intercepted, kept for the reviewer."""

    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    comment: str


def sensitive_strategy(comment: str = DEFAULT_SENSITIVE_COMMENT) -> InterventionStrategy:
    """Strategy that always intervenes with ``comment``."""

    def evaluate(trace: Trace, args: dict[str, Any]) -> str | None:
        return comment

    return evaluate


class HITLInterceptor(Interceptor):
    """Suspends the run before gated tools until a reviewer decides."""

    def __init__(self) -> None:
        self.strategies: dict[str, InterventionStrategy] = {}

    def on_tool(self, tool_name: str, strategy: InterventionStrategy) -> "HITLInterceptor":
        """Gate ``tool_name`` with ``strategy``."""
        self.strategies[tool_name] = strategy
        return self

    def on_sensitive_tool(self, *tool_names: str) -> "HITLInterceptor":
        """Gate every call to ``tool_names``."""
        strategy = sensitive_strategy()
        for name in tool_names:
            self.on_tool(name, strategy)
        return self

    # --- decisions -------------------------------------------------------

    @staticmethod
    def submit(trace: Trace, tool_name: str, decision: HITLDecision) -> None:
        """Attach a reviewer decision for ``tool_name`` to a suspended trace."""
        trace.extras[DECISION_PREFIX + tool_name] = decision.model_dump(mode="json")

    @staticmethod
    def get_decision(trace: Trace, tool_name: str) -> HITLDecision | None:
        data = trace.extras.get(DECISION_PREFIX + tool_name)
        if data is None:
            return None
        return HITLDecision.model_validate(data)

    @staticmethod
    def pending_task(trace: Trace) -> HITLTask | None:
        """The call waiting for a decision, if any."""
        data = trace.extras.get(LAST_INTERVENED)
        if data is None:
            return None
        return HITLTask.model_validate(data)

    @staticmethod
    def _clear(trace: Trace, tool_name: str) -> None:
        trace.extras.pop(DECISION_PREFIX + tool_name, None)
        trace.extras.pop(LAST_INTERVENED, None)

    # --- hooks -----------------------------------------------------------

    def on_action(self, trace: Trace, tool_name: str, args: dict[str, Any]) -> None:
        strategy = self.strategies.get(tool_name)
        if strategy is None:
            return

        comment = strategy(trace, args)
        if comment is None:
            return

        decision = self.get_decision(trace, tool_name)
        if decision is None:
            task = HITLTask(tool_name=tool_name, args=dict(args), comment=comment)
            trace.extras[LAST_INTERVENED] = task.model_dump(mode="json")
            logger.info("Session %s: %s awaits review", trace.session_id, tool_name)
            trace.suspend(comment)
            return

        if decision.action == DecisionAction.APPROVE:
            if decision.modified_args:
                args.update(decision.modified_args)
        elif decision.action == DecisionAction.SKIP:
            trace.last_observation = decision.comment_or(DEFAULT_SKIP_COMMENT)
        else:
            self._clear(trace, tool_name)
            trace.finish(decision.comment_or(DEFAULT_REJECT_COMMENT))

    def on_observation(self, trace: Trace, tool_name: str, result: str) -> None:
        if tool_name not in self.strategies:
            return

        decision = self.get_decision(trace, tool_name)
        if decision is None:
            return

        if decision.action == DecisionAction.APPROVE and decision.comment:
            trace.last_observation = f"{result} (Note: {decision.comment})"
        self._clear(trace, tool_name)
