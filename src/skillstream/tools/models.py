"""Data models for the tool system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..core.models import generate_id


@dataclass
class ToolCall:
    """A tool invocation requested inline by the model."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: generate_id("tool"))

    def to_context(self) -> str:
        """Format for display."""
        args_str = ", ".join(f"{k}={v!r}" for k, v in self.arguments.items())
        return f"{self.name}({args_str})"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass
class ToolResult:
    """Result of a tool call, successful or not."""

    tool_call_id: str
    tool_name: str
    content: str
    is_error: bool = False
    cached: bool = False

    @property
    def success(self) -> bool:
        return not self.is_error

    def to_dict(self) -> dict[str, Any]:
        return {
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "content": self.content,
            "isError": self.is_error,
        }


@dataclass
class ToolSpec:
    """Public description of a registered tool."""

    name: str
    description: str
    parameters: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "parameters": self.parameters}
