"""Skills: provider adapters producing a uniform chunk stream."""

from .base import BaseSkill
from .files import fold_files, is_supported_text_file
from .models import ChunkType, SkillChunk, SkillContext, SkillInput, SkillType
from .multimodal import MultimodalSkill
from .registry import SkillRegistry, default_skill_registry, select_skill
from .text import TextSkill, ToolMarkerScanner

__all__ = [
    "BaseSkill",
    "TextSkill",
    "MultimodalSkill",
    "SkillRegistry",
    "select_skill",
    "default_skill_registry",
    # Models
    "ChunkType",
    "SkillChunk",
    "SkillContext",
    "SkillInput",
    "SkillType",
    # Helpers
    "ToolMarkerScanner",
    "fold_files",
    "is_supported_text_file",
]
