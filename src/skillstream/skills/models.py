"""Data models for skills and their output stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import httpx

from ..core import defaults as D
from ..core.config import AppConfig
from ..core.schemas import ChatRequest, ImageData
from ..tools.client import ToolClient
from ..tools.models import ToolCall, ToolResult


class SkillType(StrEnum):
    TEXT = "text"
    MULTIMODAL = "multimodal"


class ChunkType(StrEnum):
    CONTENT = "content"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass
class SkillChunk:
    """One item of a skill's output stream.

    Errors are values in the stream, never exceptions raised past the skill.
    """

    type: ChunkType
    content: str = ""
    tool_call: ToolCall | None = None
    tool_result: ToolResult | None = None
    error: str | None = None

    @classmethod
    def text(cls, content: str) -> SkillChunk:
        return cls(ChunkType.CONTENT, content=content)

    @classmethod
    def call(cls, tool_call: ToolCall) -> SkillChunk:
        return cls(ChunkType.TOOL_CALL, tool_call=tool_call)

    @classmethod
    def result(cls, tool_result: ToolResult) -> SkillChunk:
        return cls(ChunkType.TOOL_RESULT, tool_result=tool_result)

    @classmethod
    def failure(cls, error: str) -> SkillChunk:
        return cls(ChunkType.ERROR, error=error)

    @classmethod
    def done(cls) -> SkillChunk:
        return cls(ChunkType.COMPLETE)


@dataclass
class SkillInput:
    """Normalized input handed to a skill."""

    messages: list[dict[str, Any]]
    images: list[ImageData] = field(default_factory=list)
    temperature: float = D.DEFAULT_TEMPERATURE
    max_tokens: int | None = None
    enable_tools: bool = False
    model: str | None = None

    @classmethod
    def from_request(cls, request: ChatRequest, messages: list[dict[str, Any]]) -> SkillInput:
        return cls(
            messages=messages,
            images=list(request.images),
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            enable_tools=request.enable_tools,
            model=request.model,
        )


@dataclass
class SkillContext:
    """Per-execution collaborators passed to a skill."""

    task_id: str
    step_id: str
    config: AppConfig
    http: httpx.AsyncClient
    tools: ToolClient | None = None
