"""Keeps the request sent to the model within a message and token budget.

Only the outgoing request is trimmed. ``trace.messages`` keeps the full
history, so trimming never affects what is persisted or resumed.
"""

import json
import logging

from ostinato.agent.interceptor import Interceptor
from ostinato.agent.trace import Trace
from ostinato.llm.client import Message

logger = logging.getLogger(__name__)

TRIM_MARKER = "[Historical context trimmed]"


def estimate_tokens(message: Message) -> int:
    """Estimate token count for a message.

    Uses a simple heuristic: ~4 characters per token.

    Args:
        message: Message to estimate tokens for

    Returns:
        Estimated token count
    """
    text = message.content or ""
    if message.tool_calls:
        for tc in message.tool_calls:
            text += tc.name + json.dumps(tc.arguments, default=str)
    return len(text) // 4


def estimate_total_tokens(messages: list[Message]) -> int:
    return sum(estimate_tokens(msg) for msg in messages)


class ContextWindowInterceptor(Interceptor):
    """Drops the oldest history from each model request when it grows too long.

    The first user message (the task) is always kept, and a system note
    records how many messages were dropped. The kept window never starts on
    a tool message whose assistant tool call was dropped.
    """

    def __init__(self, max_messages: int = 10, max_tokens: int = 4000):
        self.max_messages = max(4, max_messages)
        self.max_tokens = max(1000, max_tokens)

    def on_model_start(self, trace: Trace, messages: list[Message]) -> None:
        # Leading system messages are prompt, not history
        head = 0
        while head < len(messages) and messages[head].role == "system":
            head += 1
        system, history = messages[:head], messages[head:]

        if len(history) < 4:
            return
        if (
            len(history) <= self.max_messages + 2
            and estimate_total_tokens(history) <= self.max_tokens
        ):
            return

        first_user = next((i for i, m in enumerate(history) if m.role == "user"), None)

        start = max(0, len(history) - self.max_messages)
        while start > 0 and history[start].role == "tool":
            start -= 1

        kept: list[Message] = []
        dropped = start
        if first_user is not None and first_user < start:
            kept.append(history[first_user])
            dropped -= 1
        if dropped > 0:
            kept.append(
                Message(
                    role="system",
                    content=f"{TRIM_MARKER} (Dropped {dropped} messages for context optimization)",
                )
            )
        kept.extend(history[start:])

        logger.debug(
            "Session %s: request trimmed from %d to %d messages",
            trace.session_id,
            len(history),
            len(kept),
        )
        messages[:] = system + kept
