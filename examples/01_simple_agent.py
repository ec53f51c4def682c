"""
Simple Agent Example
====================

This example runs the ReAct loop with two small tools, first with the
Thought/Action text protocol and then with a plan made up front.

Prerequisites:
- Ollama installed and running
- A model pulled (e.g., qwen2.5:7b)
- ostinato installed: pip install ostinato

Usage:
    python examples/01_simple_agent.py
"""

import asyncio
from datetime import datetime

from ostinato.agent import ReActAgent
from ostinato.config.schema import AgentConfig
from ostinato.llm.ollama import OllamaClient
from ostinato.tools.registry import ToolRegistry, tool


@tool(description="Get the current weather for a city")
async def get_weather(city: str) -> str:
    """Weather lookup.

    Args:
        city: City name
    """
    # Canned data, swap in a real weather API here
    return f"{city}: 25°C, sunny"


@tool(description="Get the current local time")
async def get_time() -> str:
    return datetime.now().strftime("%H:%M")


async def main():
    llm = OllamaClient(model="qwen2.5:7b", base_url="http://localhost:11434/v1")
    tools = ToolRegistry.from_registered()
    print(f"Loaded {len(tools)} tools: {', '.join(t.name for t in tools.tools())}\n")

    agent = ReActAgent(llm=llm, tools=tools, config=AgentConfig(max_steps=6))
    answer = await agent.run("What time is it, and should I bring sunglasses in Rome?")
    print(f"Answer: {answer}\n")

    planner = ReActAgent(
        llm=llm,
        tools=tools,
        config=AgentConfig(max_steps=8, planning_mode=True),
    )
    trace = planner.new_trace()
    await planner.call("Compare the weather in Rome and Oslo and pick one for a picnic.", trace)

    print("Plan:")
    print(trace.formatted_plans())
    print(f"\nAnswer: {trace.final_answer}")
    print(
        f"\n{trace.metrics.llm_calls} model calls, {trace.metrics.tool_calls} tool calls, "
        f"{trace.metrics.total_tokens} tokens"
    )


if __name__ == "__main__":
    asyncio.run(main())
