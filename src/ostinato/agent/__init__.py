"""ReAct agent loop with planning and resumable suspension.

The loop alternates between a reasoning step (one model call) and an action
step (the tool calls the model asked for) until the model produces a final
answer, the step budget runs out, or an interceptor suspends the run. All
state lives in a serializable :class:`Trace`, so a suspended run can be
resumed later, possibly in another process.

Usage::

    from ostinato.agent import ReActAgent
    from ostinato.config.loader import load_config

    agent = ReActAgent.from_config(load_config(), tools=[...])
    answer = await agent.run("What is the weather in Paris?")
"""

from ostinato.agent.action import ActionStep
from ostinato.agent.controller import Controller
from ostinato.agent.errors import (
    LoopDetectedError,
    ModelCallError,
    OstinatoError,
    StepNotFoundError,
    TraceNotFoundError,
)
from ostinato.agent.interceptor import Interceptor, InterceptorPipeline
from ostinato.agent.loop import ReActAgent
from ostinato.agent.plan import PlanStep, clean_plans
from ostinato.agent.plan_tools import PlanTools
from ostinato.agent.reason import ReasonStep, extract_final_answer
from ostinato.agent.runtime import AgentRuntime
from ostinato.agent.trace import Metrics, Route, Trace

__all__ = [
    "ActionStep",
    "AgentRuntime",
    "Controller",
    "Interceptor",
    "InterceptorPipeline",
    "LoopDetectedError",
    "Metrics",
    "ModelCallError",
    "OstinatoError",
    "PlanStep",
    "PlanTools",
    "ReActAgent",
    "ReasonStep",
    "Route",
    "StepNotFoundError",
    "Trace",
    "TraceNotFoundError",
    "clean_plans",
    "extract_final_answer",
]
