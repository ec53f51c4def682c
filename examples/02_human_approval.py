#!/usr/bin/env python3
"""Example: Human Approval

A gated tool suspends the run. The suspended trace is stored in SQLite,
a reviewer decision is attached, and a fresh agent resumes the session
from where it stopped. The tool runs exactly once.

Usage:
    python examples/02_human_approval.py
"""

import asyncio
import tempfile
from pathlib import Path

from ostinato.agent import ReActAgent
from ostinato.intercept import HITLDecision, HITLInterceptor, StopLoopInterceptor
from ostinato.llm.ollama import OllamaClient
from ostinato.sessions import TraceStore
from ostinato.tools.registry import ToolRegistry, tool


@tool(description="Send an email")
async def send_email(to: str, body: str) -> str:
    """Pretend to send an email.

    Args:
        to: Recipient address
        body: Message text
    """
    print(f"  [send_email] to={to!r} body={body[:40]!r}")
    return f"Email sent to {to}"


def build_agent(store: TraceStore) -> ReActAgent:
    return ReActAgent(
        llm=OllamaClient(model="qwen2.5:7b"),
        tools=ToolRegistry.from_registered(),
        interceptors=[HITLInterceptor().on_sensitive_tool("send_email"), StopLoopInterceptor()],
        store=store,
    )


async def main():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = TraceStore(Path(tmpdir) / "sessions.db")

        agent = build_agent(store)
        trace = agent.new_trace("report")
        await agent.call("Email alice@example.com that the report is ready.", trace)

        if not trace.pending:
            print(f"Finished without approval: {trace.final_answer}")
            return

        task = HITLInterceptor.pending_task(trace)
        print(f"Suspended: {trace.pending_reason}")
        print(f"  waiting on {task.tool_name}({task.args})")

        # Later, possibly in another process
        stored = store.load("report")
        HITLInterceptor.submit(stored, task.tool_name, HITLDecision.approve("Checked by Sam"))

        resumed = build_agent(store)
        await resumed.call(None, stored)
        print(f"Answer: {stored.final_answer}")


if __name__ == "__main__":
    asyncio.run(main())
