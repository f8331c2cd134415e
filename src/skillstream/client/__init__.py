"""Client stream consumer and task state."""

from .consumer import (
    SSEEventDecoder,
    StreamOutcome,
    TaskCallbacks,
    TaskStreamClient,
    dispatch_event,
)
from .state import TaskProgress, TaskState

__all__ = [
    "TaskStreamClient",
    "TaskCallbacks",
    "StreamOutcome",
    "SSEEventDecoder",
    "dispatch_event",
    "TaskState",
    "TaskProgress",
]
