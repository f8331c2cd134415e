"""Skill registry and selection."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from ..core.config import AppConfig
from .base import BaseSkill
from .models import SkillType
from .multimodal import MultimodalSkill
from .text import TextSkill


class SkillRegistry:
    """Read-only mapping of skill type to skill, built once at startup."""

    def __init__(self, skills: Iterable[BaseSkill]):
        self._skills = MappingProxyType({skill.type: skill for skill in skills})

    def __contains__(self, skill_type: SkillType) -> bool:
        return skill_type in self._skills

    def get(self, skill_type: SkillType) -> BaseSkill:
        try:
            return self._skills[skill_type]
        except KeyError:
            raise LookupError(f"No skill registered for {skill_type}") from None

    def list_skills(self) -> list[BaseSkill]:
        return list(self._skills.values())


def select_skill(registry: SkillRegistry, *, has_images: bool) -> BaseSkill:
    """Images go to the multimodal skill; everything else to the text skill."""
    return registry.get(SkillType.MULTIMODAL if has_images else SkillType.TEXT)


def default_skill_registry(config: AppConfig) -> SkillRegistry:
    return SkillRegistry(
        [
            TextSkill(config.text_api_url, config.text_model, config.deepseek_api_key),
            MultimodalSkill(config.vision_api_url, config.vision_model, config.qwen_api_key),
        ]
    )
