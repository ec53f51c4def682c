"""Tool types: the schema shown to the model and the coroutine behind it."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolParameter:
    """One named argument of a tool, typed by its JSON Schema type name."""

    name: str
    type: str
    description: str
    required: bool = True
    items: dict[str, Any] | None = None

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.type == "array":
            # Untyped lists are offered as lists of strings
            schema["items"] = self.items or {"type": "string"}
        return schema

    def signature(self) -> str:
        suffix = "" if self.required else " (optional)"
        return f"{self.name}: {self.type}{suffix}"


@dataclass
class ToolSchema:
    """Name, purpose and arguments of a tool."""

    name: str
    description: str
    parameters: list[ToolParameter] = field(default_factory=list)

    def to_openai_format(self) -> dict[str, Any]:
        """Function-calling entry for the ``tools`` field of a chat request."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.json_schema() for p in self.parameters},
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }

    def describe(self) -> str:
        """``name(arg: type, ...): description``, as listed in text-protocol prompts."""
        params = ", ".join(p.signature() for p in self.parameters)
        return f"{self.name}({params}): {self.description}"


ToolFunction = Callable[..., Awaitable[Any]]


@dataclass
class Tool:
    """A schema bound to the coroutine that implements it."""

    schema: ToolSchema
    fn: ToolFunction

    @property
    def name(self) -> str:
        return self.schema.name

    async def execute(self, **kwargs: Any) -> str:
        """Await the tool and return its result as text."""
        result = await self.fn(**kwargs)
        return result if isinstance(result, str) else str(result)
