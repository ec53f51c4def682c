"""In-process scheduler for the loop steps.

The controller owns no state of its own: it reads ``trace.route`` to pick the
next step and stops when the trace ends or is suspended. Everything needed to
continue lives in the trace, so a suspended run resumes by handing the same
(possibly deserialized) trace back to :meth:`Controller.run`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from ostinato.agent.errors import StepNotFoundError
from ostinato.agent.interceptor import InterceptorPipeline
from ostinato.agent.trace import Route, Trace

logger = logging.getLogger(__name__)


class Step(Protocol):
    name: str

    async def run(self, trace: Trace) -> None: ...


class Controller:
    """Invokes steps by name according to ``Trace.route``."""

    def __init__(self, steps: Iterable[Step], interceptors: InterceptorPipeline | None = None):
        self.steps: dict[str, Step] = {str(step.name): step for step in steps}
        self.interceptors = interceptors or InterceptorPipeline()

    async def invoke_step(self, name: str, trace: Trace) -> None:
        """Run one step, bracketed by the node hooks.

        Raises:
            StepNotFoundError: If no step is registered under ``name``
        """
        step = self.steps.get(name)
        if step is None:
            raise StepNotFoundError(
                f"No step registered for route '{name}'",
                context={"session_id": trace.session_id, "known": sorted(self.steps)},
            )

        await self.interceptors.emit("on_node_start", trace, name)
        await step.run(trace)
        await self.interceptors.emit("on_node_end", trace, name)

    def set_route(self, trace: Trace, name: str) -> None:
        trace.set_route(name)

    def serialize(self, trace: Trace) -> bytes:
        return trace.to_bytes()

    def deserialize(self, data: bytes | str) -> Trace:
        return Trace.from_bytes(data)

    def stop(self, trace: Trace, reason: str | None = None) -> None:
        trace.suspend(reason)

    def is_stopped(self, trace: Trace) -> bool:
        return trace.pending

    async def run(self, trace: Trace) -> Trace:
        """Drive ``trace`` until it ends or is suspended."""
        while trace.route != Route.END and not trace.pending:
            await self.invoke_step(trace.route, trace)
        return trace
