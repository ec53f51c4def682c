"""Interceptor contract and the pipeline that dispatches to it.

An interceptor is any object implementing some subset of the hooks below.
Hooks may be plain functions or coroutines. A hook that raises aborts the
run; a hook that calls ``trace.suspend()`` asks the loop to stop at its next
checkpoint without raising.

=================  =====================================  ===========================
hook               arguments                              fired by
=================  =====================================  ===========================
on_agent_start     trace                                  ReActAgent.call
on_agent_end       trace                                  ReActAgent.call
on_node_start      trace, node                            Controller, before a step
on_node_end        trace, node                            Controller, after a step
on_model_start     trace, messages                        Reason/Plan, before calling
on_model_end       trace, response                        Reason/Plan, after calling
on_thought         trace, thought                         ReasonStep, text protocol
on_action          trace, tool_name, args                 ActionStep, before a tool
on_observation     trace, tool_name, result               ActionStep, after a tool
on_plan            trace, message                         PlanStep and plan tools
=================  =====================================  ===========================
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ostinato.agent.trace import Trace
    from ostinato.llm.client import CompletionResponse, Message

logger = logging.getLogger(__name__)

HOOKS = (
    "on_agent_start",
    "on_agent_end",
    "on_node_start",
    "on_node_end",
    "on_model_start",
    "on_model_end",
    "on_thought",
    "on_action",
    "on_observation",
    "on_plan",
)


class Interceptor:
    """Convenience base class whose hooks all do nothing.

    Subclassing is optional; the pipeline only looks hooks up by name.
    """

    def on_agent_start(self, trace: Trace) -> None:
        pass

    def on_agent_end(self, trace: Trace) -> None:
        pass

    def on_node_start(self, trace: Trace, node: str) -> None:
        pass

    def on_node_end(self, trace: Trace, node: str) -> None:
        pass

    def on_model_start(self, trace: Trace, messages: list[Message]) -> None:
        pass

    def on_model_end(self, trace: Trace, response: CompletionResponse) -> None:
        pass

    def on_thought(self, trace: Trace, thought: str) -> None:
        pass

    def on_action(self, trace: Trace, tool_name: str, args: dict[str, Any]) -> None:
        pass

    def on_observation(self, trace: Trace, tool_name: str, result: str) -> None:
        pass

    def on_plan(self, trace: Trace, message: Message | None) -> None:
        pass


class InterceptorPipeline:
    """Ordered list of interceptors, invoked in registration order."""

    def __init__(self, interceptors: Iterable[Any] = ()):
        self._interceptors: list[Any] = list(interceptors)

    def add(self, interceptor: Any) -> None:
        self._interceptors.append(interceptor)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    async def emit(self, hook: str, *args: Any) -> None:
        """Invoke ``hook`` on every interceptor that implements it.

        Exceptions are not caught: an interceptor raising is how a run is
        aborted.

        Raises:
            ValueError: If ``hook`` is not a known hook name
        """
        if hook not in HOOKS:
            raise ValueError(f"Unknown interceptor hook: {hook}")

        for interceptor in self._interceptors:
            fn = getattr(interceptor, hook, None)
            if fn is None:
                continue
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
