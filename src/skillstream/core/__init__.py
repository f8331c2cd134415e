"""Core module for skillstream.

The orchestrator lives in ``skillstream.core.orchestrator`` and is not
re-exported here, since it depends on the skills package which in turn
imports from core.
"""

from . import defaults
from .config import AppConfig, configure_logging
from .errors import (
    NotFoundError,
    SkillstreamError,
    TaskExecutionError,
    UpstreamError,
    ValidationError,
)
from .events import Event, EventType, StepEvent, TaskEvent
from .models import Step, StepStatus, StepType, Task, TaskStatus, TaskType, determine_task_type
from .schemas import ChatRequest, FileData, ImageData, Message

__all__ = [
    # Defaults
    "defaults",
    # Config
    "AppConfig",
    "configure_logging",
    # Errors
    "SkillstreamError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "TaskExecutionError",
    # Models
    "Task",
    "TaskType",
    "TaskStatus",
    "Step",
    "StepType",
    "StepStatus",
    "determine_task_type",
    # Events
    "Event",
    "EventType",
    "TaskEvent",
    "StepEvent",
    # Request schemas
    "ChatRequest",
    "Message",
    "ImageData",
    "FileData",
]
