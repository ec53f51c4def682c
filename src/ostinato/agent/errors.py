"""Exceptions raised by the agent loop.

Only conditions the loop cannot absorb into the conversation are raised;
tool failures, malformed actions and step exhaustion become observations or a
final answer instead.
"""

from typing import Any


class OstinatoError(Exception):
    """Base exception for all ostinato errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ModelCallError(OstinatoError):
    """The model call kept failing after every retry."""

    def __init__(self, message: str, attempts: int = 0, context: dict[str, Any] | None = None):
        super().__init__(message, context)
        self.attempts = attempts


class StepNotFoundError(OstinatoError):
    """The trace routes to a step the controller does not know."""


class LoopDetectedError(OstinatoError):
    """An interceptor detected the agent repeating itself."""


class TraceNotFoundError(OstinatoError):
    """No persisted trace exists for the requested session."""
