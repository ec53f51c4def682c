"""The ``feedback`` tool: lets the model end a run and hand text back.

The tool has no implementation of its own. PlanStep and ActionStep recognise
a call to it and finish the trace with the ``source`` argument as the final
answer.
"""

from typing import Any

from ostinato.llm.client import ToolCall
from ostinato.tools.base import ToolParameter, ToolSchema

FEEDBACK_TOOL_NAME = "feedback"

_DESCRIPTIONS = {
    "en": (
        "Stop working on the task and reply to the requester directly. Use this when the "
        "request is unclear, impossible, or needs information only the requester has.",
        "The message to return to the requester.",
    ),
    "zh": (
        "停止执行任务并直接回复请求方。当请求不明确、无法完成或需要请求方补充信息时使用。",
        "返回给请求方的内容。",
    ),
}


def feedback_schema(locale: str = "en") -> ToolSchema:
    description, source_description = _DESCRIPTIONS.get(locale, _DESCRIPTIONS["en"])
    return ToolSchema(
        name=FEEDBACK_TOOL_NAME,
        description=description,
        parameters=[
            ToolParameter(name="source", type="string", description=source_description),
        ],
    )


def feedback_source(name: str, args: dict[str, Any] | None) -> str | None:
    """Return the non-empty ``source`` of a feedback call, else None."""
    if name != FEEDBACK_TOOL_NAME or not args:
        return None
    source = args.get("source")
    if isinstance(source, str) and source.strip():
        return source.strip()
    return None


def find_feedback(tool_calls: list[ToolCall] | None) -> str | None:
    """First feedback ``source`` among ``tool_calls``, if any."""
    for call in tool_calls or []:
        source = feedback_source(call.name, call.arguments)
        if source is not None:
            return source
    return None
