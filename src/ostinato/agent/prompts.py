"""System prompts for the reasoning and planning steps.

Two locales are built in (``en`` and ``zh``) and two response styles:
``react`` asks the model for ``Thought:``/``Action:``/finish-marker text,
``native_tool`` relies on the backend's function calling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ostinato.agent.trace import Trace
    from ostinato.config.schema import AgentConfig
    from ostinato.tools.base import ToolSchema


class SystemPromptProvider(ABC):
    """Builds the reasoning system prompt for one agent configuration.

    Subclasses supply the locale-specific wording; ``role`` and
    ``instruction`` from the config are injected into either locale.
    """

    locale = "en"

    def __init__(self, config: AgentConfig):
        self.config = config

    def system_prompt(self, trace: Trace, tools: list[ToolSchema]) -> str:
        """Assemble the full system prompt for the next reasoning turn."""
        parts = [self.role_section()]
        if self.config.style == "native_tool":
            parts.append(self.native_instruction())
        else:
            parts.append(self.react_instruction())
        if self.config.instruction:
            parts.append(self.business_section(self.config.instruction))
        if trace.plans:
            parts.append(self.plan_section(trace))
        if self.config.style != "native_tool":
            parts.append(self.tools_section(tools))
        return "\n\n".join(p.strip() for p in parts if p)

    @abstractmethod
    def role_section(self) -> str:
        """Who the model is acting as."""

    @abstractmethod
    def react_instruction(self) -> str:
        """Response format for the Thought/Action text protocol."""

    @abstractmethod
    def native_instruction(self) -> str:
        """Guidance when tools are called through function calling."""

    @abstractmethod
    def business_section(self, instruction: str) -> str:
        """Wrap the configured task instruction."""

    @abstractmethod
    def plan_section(self, trace: Trace) -> str:
        """Render the plan board with the current step marked."""

    @abstractmethod
    def tools_section(self, tools: list[ToolSchema]) -> str:
        """List the tools the model may name in an Action."""

    # --- planning --------------------------------------------------------

    @abstractmethod
    def planning_instruction(self) -> str:
        """System prompt of the planning call."""

    @abstractmethod
    def goal_label(self) -> str:
        """Prefix of the goal line sent to the planner."""


class EnglishPrompt(SystemPromptProvider):
    locale = "en"

    def role_section(self) -> str:
        role = self.config.role or "Professional Task Solver"
        if self.config.style == "native_tool":
            return (
                f"## Your Role\n{role}. You are an expert with autonomous action capabilities. "
                "Use tools when you need information; answer directly once you have enough."
            )
        return (
            f"## Your Role\n{role}. You must solve the problem using the ReAct pattern: "
            "Thought -> Action -> Observation."
        )

    def react_instruction(self) -> str:
        marker = self.config.finish_marker
        return (
            "## Output Format (Strictly Follow)\n"
            "Thought: Briefly explain your reasoning (1-2 sentences).\n"
            "Action: To use a tool, prefer the built-in function calling. If it is not available, "
            'output ONLY one JSON object: {"name": "tool_name", "arguments": {...}}.\n'
            f"{marker} Once the task is finished, start your answer with {marker}\n\n"
            "## Core Rules\n"
            "1. Only use tools from the 'Available Tools' list.\n"
            "2. Output ONE Action and STOP to wait for the Observation. Never write an "
            "Observation yourself.\n"
            f"3. Completion is signaled ONLY by {marker}\n\n"
            "## Example\n"
            "User: What is the weather in Paris?\n"
            "Thought: I need the current weather for Paris.\n"
            'Action: {"name": "get_weather", "arguments": {"city": "Paris"}}\n'
            "Observation: 18°C, sunny.\n"
            "Thought: I have the weather information.\n"
            f"{marker} The weather in Paris is 18°C and sunny."
        )

    def native_instruction(self) -> str:
        return (
            "## Code of Conduct\n"
            "1. Provide your answer directly after analyzing the problem. Do not output labels "
            "like 'Thought:' or 'Final Answer:'.\n"
            "2. If external information is required, call a function directly.\n"
            "3. Never simulate tool execution or fabricate tool results."
        )

    def business_section(self, instruction: str) -> str:
        return f"## Core Task Instructions\n{instruction}"

    def plan_section(self, trace: Trace) -> str:
        return (
            "## Execution Plan\n"
            f"{trace.formatted_plans()}\n"
            "Work on the step marked [>]. Call update_task_progress when a step is done "
            "and revise_plan when the remaining steps no longer fit."
        )

    def tools_section(self, tools: list[ToolSchema]) -> str:
        if not tools:
            return f"Note: No tools available. Provide {self.config.finish_marker} directly."
        lines = ["## Available Tools"]
        lines.extend(f"- {schema.describe()}" for schema in tools)
        return "\n".join(lines)

    def planning_instruction(self) -> str:
        if self.config.planning_instruction:
            return self.config.planning_instruction
        return (
            "You are a planning expert. Break the user's goal into a short, ordered list of "
            "concrete steps that an agent with tools can execute one by one.\n"
            "Rules:\n"
            "1. Output one step per line, numbered 1., 2., 3. ...\n"
            "2. Keep each step to a single actionable sentence.\n"
            "3. Do not solve the task and do not add commentary."
        )

    def goal_label(self) -> str:
        return "Target: "


class ChinesePrompt(SystemPromptProvider):
    locale = "zh"

    def role_section(self) -> str:
        role = self.config.role or "你是一个专业的任务解决助手"
        if self.config.style == "native_tool":
            return f"## 角色\n{role}。需要外部信息时直接调用工具，信息充足时直接回答。"
        return (
            f"## 角色\n{role}。你必须使用 ReAct 模式解决问题："
            "Thought（思考） -> Action（行动） -> Observation（观察）。"
        )

    def react_instruction(self) -> str:
        marker = self.config.finish_marker
        return (
            "## 输出格式（必须遵守）\n"
            "Thought: 简要解释你的思考过程（1-2句话）。\n"
            'Action: 如果需要调用工具，请输出唯一的 JSON 对象：{"name": "工具名", "arguments": {...}}。'
            "不要有额外文本。\n"
            f"{marker} 任务完成后，以 {marker} 开头给出回答。\n\n"
            "## 核心规则\n"
            "1. 每次仅输出一个 Action，输出后立即停止等待 Observation。\n"
            "2. 严禁伪造 Observation，严禁调用“可用工具”之外的工具。\n"
            f"3. 最终回答必须以 {marker} 开头，否则系统无法识别任务完成。\n\n"
            "## 示例\n"
            "用户: 北京天气怎么样？\n"
            "Thought: 我需要查询北京当前的天气。\n"
            'Action: {"name": "get_weather", "arguments": {"city": "北京"}}\n'
            "Observation: 25°C，晴间多云。\n"
            "Thought: 根据观察结果，北京天气良好。\n"
            f"{marker} 北京目前晴间多云，气温约 25°C。"
        )

    def native_instruction(self) -> str:
        return (
            "## 行为准则\n"
            "1. 分析问题后直接给出回答，不要输出 'Thought:' 或 'Final Answer:' 等标签。\n"
            "2. 需要外部信息时直接调用函数。\n"
            "3. 严禁模拟工具执行过程或伪造工具结果。"
        )

    def business_section(self, instruction: str) -> str:
        return f"## 核心任务指令\n{instruction}"

    def plan_section(self, trace: Trace) -> str:
        return (
            "## 执行计划\n"
            f"{trace.formatted_plans()}\n"
            "请执行标记为 [>] 的步骤。完成一步后调用 update_task_progress，"
            "后续步骤不再适用时调用 revise_plan。"
        )

    def tools_section(self, tools: list[ToolSchema]) -> str:
        if not tools:
            return f"注意：当前没有可用工具。请直接以 {self.config.finish_marker} 给出回答。"
        lines = ["## 可用工具"]
        lines.extend(f"- {schema.describe()}" for schema in tools)
        return "\n".join(lines)

    def planning_instruction(self) -> str:
        if self.config.planning_instruction:
            return self.config.planning_instruction
        return (
            "你是一名规划专家。请将用户的目标拆解为简短、有序、可由带工具的智能体逐步执行的步骤。\n"
            "要求：\n"
            "1. 每行一个步骤，按 1.、2.、3. 编号。\n"
            "2. 每个步骤只写一句可执行的描述。\n"
            "3. 不要直接解决任务，也不要附加说明。"
        )

    def goal_label(self) -> str:
        return "目标："


def create_prompt_provider(config: AgentConfig) -> SystemPromptProvider:
    """Pick the prompt provider matching ``config.locale``."""
    if config.locale == "zh":
        return ChinesePrompt(config)
    return EnglishPrompt(config)
