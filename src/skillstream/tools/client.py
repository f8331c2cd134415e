"""Tool client: validates and dispatches inline tool calls."""

from __future__ import annotations

import json
import logging

import pydantic

from ..core import defaults as D
from ..core.cache import TTLCache
from .base import ToolRegistry
from .models import ToolCall, ToolResult, ToolSpec

logger = logging.getLogger(__name__)

TOOL_OPEN = "<tool>"
TOOL_CLOSE = "</tool>"


class ToolClient:
    """Calls tools from a registry, caching deterministic results.

    Every failure (unknown tool, invalid arguments, an exception inside the
    tool) comes back as an error ``ToolResult``; ``call_tool`` never raises.
    """

    def __init__(self, registry: ToolRegistry, cache: TTLCache | None = None):
        self.registry = registry
        self.cache = cache if cache is not None else TTLCache(default_ttl=D.DEFAULT_TOOL_CACHE_TTL)

    def list_tools(self) -> list[str]:
        return self.registry.list_tools()

    def specs(self) -> list[ToolSpec]:
        return self.registry.specs()

    def describe(self) -> str:
        """System prompt describing the tools and the inline call syntax."""
        lines = ["You can use the following tools:", ""]
        for spec in self.specs():
            params = ", ".join(spec.parameters.get("properties", {}))
            lines.append(f"- {spec.name}({params}): {spec.description}")
        example = json.dumps({"tool": "calculate", "arguments": {"expression": "2+2"}})
        lines.extend(
            [
                "",
                "To call a tool, write the call on its own line in exactly this format:",
                f"{TOOL_OPEN}{{\"tool\": \"<name>\", \"arguments\": {{...}}}}{TOOL_CLOSE}",
                "",
                f"For example: {TOOL_OPEN}{example}{TOOL_CLOSE}",
                "The tool result will be shown to the user after your call.",
            ]
        )
        return "\n".join(lines)

    async def call_tool(self, call: ToolCall) -> ToolResult:
        tool = self.registry.get(call.name)
        if tool is None:
            logger.warning("Unknown tool requested: %s", call.name)
            return self._error(call, f"Unknown tool: {call.name}")

        try:
            args = tool.Arguments.model_validate(call.arguments)
        except pydantic.ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            return self._error(call, f"Invalid arguments for {call.name}: {problems}")

        if not tool.deterministic:
            return await self._run(call, tool, args)

        key = _cache_key(call.name, args.model_dump())
        if self.cache.has(key):
            return ToolResult(
                tool_call_id=call.id,
                tool_name=call.name,
                content=self.cache.get(key),
                cached=True,
            )
        result = await self._run(call, tool, args)
        if result.success:
            self.cache.set(key, result.content)
        return result

    async def _run(self, call: ToolCall, tool, args) -> ToolResult:
        try:
            content = await tool.run(args)
        except Exception as e:
            logger.warning("Tool %s failed: %s", call.name, e)
            return self._error(call, str(e) or type(e).__name__)
        logger.debug("Tool %s succeeded", call.to_context())
        return ToolResult(tool_call_id=call.id, tool_name=call.name, content=content)

    @staticmethod
    def _error(call: ToolCall, message: str) -> ToolResult:
        return ToolResult(
            tool_call_id=call.id, tool_name=call.name, content=message, is_error=True
        )


def _cache_key(name: str, arguments: dict) -> str:
    return f"{name}:{json.dumps(arguments, sort_keys=True, separators=(',', ':'), default=str)}"
