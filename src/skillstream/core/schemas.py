"""Chat request Pydantic models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from . import defaults as D


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Message(_CamelModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1)
    name: str | None = None


class ImageData(_CamelModel):
    id: str
    base64: str
    mime_type: str = Field(alias="mimeType")
    description: str | None = None
    width: int | None = None
    height: int | None = None

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


class FileData(_CamelModel):
    id: str
    name: str
    content: str
    mime_type: str = Field(default="text/plain", alias="mimeType")
    size: int | None = None


class ChatRequest(_CamelModel):
    messages: list[Message] = Field(min_length=1)
    images: list[ImageData] = Field(default_factory=list)
    files: list[FileData] = Field(default_factory=list)
    temperature: float = D.DEFAULT_TEMPERATURE
    max_tokens: int | None = Field(default=None, alias="maxTokens")
    enable_tools: bool = Field(default=False, alias="enableTools")
    stream: bool = True
    model: str | None = None

    def message_dicts(self) -> list[dict[str, str]]:
        """Messages in the provider's ``{role, content}`` shape."""
        return [{"role": m.role, "content": m.content} for m in self.messages]
