"""Tests for the step controller."""

import pytest

from ostinato.agent.controller import Controller
from ostinato.agent.errors import StepNotFoundError
from ostinato.agent.interceptor import InterceptorPipeline
from ostinato.agent.trace import Route, Trace
from ostinato.intercept.function import FunctionInterceptor


class ScriptedStep:
    """Step that records its runs and routes to a fixed next step."""

    def __init__(self, name: str, next_route: str, suspend_on: int | None = None):
        self.name = name
        self.next_route = next_route
        self.suspend_on = suspend_on
        self.runs = 0

    async def run(self, trace: Trace) -> None:
        self.runs += 1
        if self.runs == self.suspend_on:
            trace.suspend(f"{self.name} paused")
            return
        if self.next_route == Route.END:
            trace.finish(f"done by {self.name}")
        else:
            trace.set_route(self.next_route)


@pytest.mark.asyncio
async def test_run_follows_route_until_end():
    reason = ScriptedStep(Route.REASON, Route.ACTION)
    action = ScriptedStep(Route.ACTION, Route.END)
    controller = Controller([reason, action])
    trace = Trace()

    await controller.run(trace)

    assert reason.runs == 1
    assert action.runs == 1
    assert trace.final_answer == "done by action"


@pytest.mark.asyncio
async def test_run_stops_when_suspended_and_resumes_by_route():
    reason = ScriptedStep(Route.REASON, Route.ACTION)
    action = ScriptedStep(Route.ACTION, Route.END, suspend_on=1)
    controller = Controller([reason, action])
    trace = Trace()

    await controller.run(trace)

    assert controller.is_stopped(trace)
    assert trace.route == Route.ACTION

    trace = controller.deserialize(controller.serialize(trace))
    trace.clear_pending()
    await controller.run(trace)

    assert reason.runs == 1
    assert action.runs == 2
    assert trace.route == Route.END


@pytest.mark.asyncio
async def test_unknown_route_raises():
    controller = Controller([ScriptedStep(Route.REASON, Route.END)])
    trace = Trace()
    controller.set_route(trace, "summarize")

    with pytest.raises(StepNotFoundError):
        await controller.run(trace)


@pytest.mark.asyncio
async def test_node_hooks_bracket_each_step():
    events = []
    pipeline = InterceptorPipeline(
        [
            FunctionInterceptor(
                on_node_start=lambda trace, node: events.append(f"start:{node}"),
                on_node_end=lambda trace, node: events.append(f"end:{node}"),
            )
        ]
    )
    controller = Controller(
        [ScriptedStep(Route.REASON, Route.ACTION), ScriptedStep(Route.ACTION, Route.END)],
        interceptors=pipeline,
    )

    await controller.run(Trace())

    assert events == ["start:reason", "end:reason", "start:action", "end:action"]


@pytest.mark.asyncio
async def test_stop_suspends_trace():
    controller = Controller([])
    trace = Trace()

    controller.stop(trace, "operator stop")

    assert controller.is_stopped(trace)
    assert trace.pending_reason == "operator stop"

    await controller.run(trace)
    assert trace.route == Route.REASON
