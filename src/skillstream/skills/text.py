"""Text skill: streaming chat completions with inline tool calls."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from ..core import defaults as D
from ..tools.client import TOOL_CLOSE, TOOL_OPEN
from ..tools.models import ToolCall
from .base import BaseSkill
from .models import SkillChunk, SkillContext, SkillInput, SkillType

logger = logging.getLogger(__name__)


def parse_tool_payload(payload: str) -> ToolCall | None:
    """Parse ``{"tool": name, "arguments": {...}}``; None if malformed."""
    try:
        data = json.loads(payload)
    except ValueError:
        logger.debug("Ignoring malformed tool payload: %.80s", payload)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("tool"), str):
        logger.debug("Ignoring tool payload without a tool name: %.80s", payload)
        return None
    arguments = data.get("arguments") or {}
    if not isinstance(arguments, dict):
        logger.debug("Ignoring tool payload with non-object arguments: %.80s", payload)
        return None
    return ToolCall(name=data["tool"], arguments=arguments)


class ToolMarkerScanner:
    """Finds ``<tool>...</tool>`` pairs in streamed text.

    Text is fed as it is emitted; a marker may be split across any number
    of deltas. Consumed markers are cut out of the buffer so each call is
    found once.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, text: str) -> list[ToolCall]:
        self._buffer += text
        calls: list[ToolCall] = []
        while True:
            start = self._buffer.find(TOOL_OPEN)
            if start == -1:
                # Keep just enough to match an opening tag split across deltas
                self._buffer = self._buffer[-(len(TOOL_OPEN) - 1) :]
                break
            end = self._buffer.find(TOOL_CLOSE, start + len(TOOL_OPEN))
            if end == -1:
                self._buffer = self._buffer[start:]
                break
            payload = self._buffer[start + len(TOOL_OPEN) : end]
            self._buffer = self._buffer[end + len(TOOL_CLOSE) :]
            call = parse_tool_payload(payload)
            if call is not None:
                calls.append(call)
        return calls


def format_tool_result(name: str, content: str) -> str:
    """Text injected into the content stream after a tool runs."""
    return f"\n[Tool {name} result]\n{content[: D.TOOL_RESULT_PREVIEW_CHARS]}"


class TextSkill(BaseSkill):
    """General text chat via an OpenAI-compatible completion API."""

    name = "text"
    type = SkillType.TEXT
    description = "Text chat and code generation"
    provider = "DeepSeek"
    credential_env = "DEEPSEEK_API_KEY"

    def build_messages(self, skill_input: SkillInput, ctx: SkillContext) -> list[dict[str, Any]]:
        messages = list(skill_input.messages)
        if skill_input.enable_tools and ctx.tools is not None:
            messages.insert(0, {"role": "system", "content": ctx.tools.describe()})
        return messages

    async def transform(
        self,
        deltas: AsyncIterator[str | SkillChunk],
        skill_input: SkillInput,
        ctx: SkillContext,
    ) -> AsyncIterator[SkillChunk]:
        tools = ctx.tools if skill_input.enable_tools else None
        scanner = ToolMarkerScanner() if tools is not None else None

        async for delta in deltas:
            if isinstance(delta, SkillChunk):
                yield delta
                continue
            yield SkillChunk.text(delta)
            if scanner is None:
                continue
            for call in scanner.feed(delta):
                logger.info("Task %s: tool call %s", ctx.task_id, call.to_context())
                yield SkillChunk.call(call)
                result = await tools.call_tool(call)
                yield SkillChunk.result(result)
                yield SkillChunk.text(format_tool_result(call.name, result.content))
