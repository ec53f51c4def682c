"""Built-in interceptors.

- :class:`HITLInterceptor` - suspend before sensitive tools until a reviewer decides
- :class:`StopLoopInterceptor` - abort when the model keeps repeating one action
- :class:`ContextWindowInterceptor` - trim long histories from outgoing requests
- :class:`FunctionInterceptor` - build an interceptor from plain callables
"""

from ostinato.intercept.context_window import ContextWindowInterceptor
from ostinato.intercept.function import FunctionInterceptor
from ostinato.intercept.hitl import (
    DecisionAction,
    HITLDecision,
    HITLInterceptor,
    HITLTask,
    sensitive_strategy,
)
from ostinato.intercept.stop_loop import StopLoopInterceptor

__all__ = [
    "ContextWindowInterceptor",
    "DecisionAction",
    "FunctionInterceptor",
    "HITLDecision",
    "HITLInterceptor",
    "HITLTask",
    "StopLoopInterceptor",
    "sensitive_strategy",
]
