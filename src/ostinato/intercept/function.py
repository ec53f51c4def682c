"""Interceptor assembled from plain callables."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class FunctionInterceptor:
    """One optional callable per hook; unset hooks are skipped.

    Usage::

        seen = []
        agent = ReActAgent(llm, interceptors=[
            FunctionInterceptor(on_action=lambda trace, name, args: seen.append(name)),
        ])
    """

    on_agent_start: Callable[..., Any] | None = None
    on_agent_end: Callable[..., Any] | None = None
    on_node_start: Callable[..., Any] | None = None
    on_node_end: Callable[..., Any] | None = None
    on_model_start: Callable[..., Any] | None = None
    on_model_end: Callable[..., Any] | None = None
    on_thought: Callable[..., Any] | None = None
    on_action: Callable[..., Any] | None = None
    on_observation: Callable[..., Any] | None = None
    on_plan: Callable[..., Any] | None = None
