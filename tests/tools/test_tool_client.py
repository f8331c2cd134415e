"""Tests for the tool client."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from skillstream.core.cache import TTLCache
from skillstream.tools.base import BaseTool, ToolRegistry
from skillstream.tools.builtin import default_tool_registry
from skillstream.tools.client import TOOL_CLOSE, TOOL_OPEN, ToolClient
from skillstream.tools.models import ToolCall


class CountingTool(BaseTool):
    name = "count"
    description = "Counts calls"
    deterministic = True

    class Arguments(BaseModel):
        value: int

    def __init__(self):
        self.calls = 0

    async def run(self, args):
        self.calls += 1
        if args.value < 0:
            raise ValueError("negative")
        return str(args.value * 2)


class BrokenTool(BaseTool):
    name = "broken"
    description = "Always fails"

    class Arguments(BaseModel):
        pass

    async def run(self, args):
        raise RuntimeError()


@pytest.fixture
def counting():
    return CountingTool()


@pytest.fixture
def client(counting):
    return ToolClient(ToolRegistry([counting, BrokenTool()]), cache=TTLCache(default_ttl=60))


class TestCallTool:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, client):
        result = await client.call_tool(ToolCall(name="missing"))
        assert result.is_error
        assert result.content == "Unknown tool: missing"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, client, counting):
        result = await client.call_tool(ToolCall(name="count", arguments={"value": "many"}))
        assert result.is_error
        assert result.content.startswith("Invalid arguments for count: value:")
        assert counting.calls == 0

    @pytest.mark.asyncio
    async def test_deterministic_results_cached(self, client, counting):
        first = await client.call_tool(ToolCall(name="count", arguments={"value": 2}))
        second = await client.call_tool(ToolCall(name="count", arguments={"value": 2}))
        assert first.content == second.content == "4"
        assert not first.cached
        assert second.cached
        assert second.tool_call_id != first.tool_call_id
        assert counting.calls == 1

    @pytest.mark.asyncio
    async def test_failures_not_cached(self, client, counting):
        await client.call_tool(ToolCall(name="count", arguments={"value": -1}))
        result = await client.call_tool(ToolCall(name="count", arguments={"value": -1}))
        assert result.is_error
        assert result.content == "negative"
        assert counting.calls == 2

    @pytest.mark.asyncio
    async def test_exception_without_message(self, client):
        result = await client.call_tool(ToolCall(name="broken"))
        assert result.is_error
        assert result.content == "RuntimeError"


class TestDescribe:
    def test_lists_tools_and_syntax(self):
        text = ToolClient(default_tool_registry()).describe()
        assert "- calculate(expression):" in text
        assert "- web_search(query, num_results):" in text
        assert f'{TOOL_OPEN}{{"tool": "<name>", "arguments": {{...}}}}{TOOL_CLOSE}' in text

    def test_list_tools(self, client):
        assert client.list_tools() == ["count", "broken"]
        assert [s.name for s in client.specs()] == ["count", "broken"]
