"""Tool system for inline tool calls."""

from .base import BaseTool, ToolRegistry
from .builtin import Calculate, ExecuteCode, FileOperations, WebSearch, default_tool_registry
from .client import ToolClient
from .models import ToolCall, ToolResult, ToolSpec

__all__ = [
    # Base
    "BaseTool",
    "ToolRegistry",
    "ToolClient",
    # Models
    "ToolCall",
    "ToolResult",
    "ToolSpec",
    # Built-in tools
    "Calculate",
    "WebSearch",
    "ExecuteCode",
    "FileOperations",
    "default_tool_registry",
]
