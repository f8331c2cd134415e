"""Multimodal skill: image understanding via a vision model."""

from __future__ import annotations

from typing import Any

from ..core.schemas import ImageData
from .base import BaseSkill
from .models import SkillContext, SkillInput, SkillType


def build_image_content(text: str, images: list[ImageData]) -> list[dict[str, Any]]:
    """Multi-part content: one part per image, then the text."""
    parts: list[dict[str, Any]] = [
        {"type": "image_url", "image_url": {"url": image.data_url()}} for image in images
    ]
    parts.append({"type": "text", "text": text})
    return parts


class MultimodalSkill(BaseSkill):
    """Images plus text, answered by an OpenAI-compatible vision API.

    Images attach to the last user message only; earlier turns stay plain
    text.
    """

    name = "multimodal"
    type = SkillType.MULTIMODAL
    description = "Image understanding and visual question answering"
    provider = "Qwen"
    credential_env = "QWEN_API_KEY"
    accepts_message_content = True

    def build_messages(self, skill_input: SkillInput, ctx: SkillContext) -> list[dict[str, Any]]:
        messages = [dict(m) for m in skill_input.messages]
        last_user = next(
            (i for i in range(len(messages) - 1, -1, -1) if messages[i]["role"] == "user"),
            None,
        )
        if last_user is not None and skill_input.images:
            messages[last_user]["content"] = build_image_content(
                messages[last_user]["content"], skill_input.images
            )
        return messages
