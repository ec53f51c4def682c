"""Loop breaker: aborts a run whose model keeps asking for the same action."""

import json
import logging
from typing import Any

from ostinato.agent.errors import LoopDetectedError
from ostinato.agent.interceptor import Interceptor
from ostinato.agent.trace import Trace
from ostinato.llm.client import CompletionResponse

logger = logging.getLogger(__name__)

HISTORY_KEY = "stop_loop_history"


def fingerprint(response: CompletionResponse) -> str | None:
    """Normalized action intent of one model turn.

    Tool-call arguments are serialized with sorted keys so that key order
    does not change the fingerprint. For free text only the part from
    ``Action:`` on counts, so varying thoughts do not hide a repeat.
    """
    if response.tool_calls:
        parts = [
            f"{call.name}{json.dumps(call.arguments, sort_keys=True, default=str)}"
            for call in response.tool_calls
        ]
        return "tool:" + "".join(parts)

    content = (response.content or "").strip()
    if not content:
        return None
    idx = content.find("Action:")
    return content[idx:].strip() if idx >= 0 else content


class StopLoopInterceptor(Interceptor):
    """Raise when one intent repeats ``max_repeats`` times in the last ``window`` turns."""

    def __init__(self, max_repeats: int = 3, window: int = 6):
        self.max_repeats = max(2, max_repeats)
        self.window = max(4, window)

    def on_model_end(self, trace: Trace, response: CompletionResponse) -> None:
        fp = fingerprint(response)
        if fp is None:
            return

        history: list[Any] = trace.extras.setdefault(HISTORY_KEY, [])
        history.append(fp)
        if len(history) > self.window:
            del history[: len(history) - self.window]

        count = history.count(fp)
        if count >= self.max_repeats:
            message = (
                f"Detected ReAct loop: action intent repeated {count} times "
                f"in the last {len(history)} steps."
            )
            logger.warning("Session %s: %s", trace.session_id, message)
            raise LoopDetectedError(
                message, context={"session_id": trace.session_id, "fingerprint": fp}
            )
