"""Stream event models.

Events are the only channel between the orchestrator and the client. Each
event snapshots the task/step it describes at emission time, so later
mutations never leak into already-emitted events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .models import Step, Task


class EventType(StrEnum):
    TASK = "task"
    STEP = "step"
    CONTENT = "content"
    ERROR = "error"
    COMPLETE = "complete"


class TaskEvent(StrEnum):
    STARTED = "started"
    UPDATED = "updated"
    COMPLETED = "completed"
    FAILED = "failed"


class StepEvent(StrEnum):
    START = "start"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class Event:
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def task(cls, task: Task, event: TaskEvent) -> Event:
        return cls(EventType.TASK, {"task": task.to_dict(), "event": event.value})

    @classmethod
    def step(cls, step: Step, event: StepEvent) -> Event:
        return cls(EventType.STEP, {"step": step.to_dict(), "event": event.value})

    @classmethod
    def content(cls, text: str) -> Event:
        return cls(EventType.CONTENT, {"content": text})

    @classmethod
    def error(cls, message: str, task: Task | None = None) -> Event:
        data: dict[str, Any] = {"error": message}
        if task is not None:
            data["task"] = task.to_dict()
        return cls(EventType.ERROR, data)

    @classmethod
    def complete(cls, task: Task) -> Event:
        return cls(EventType.COMPLETE, {"task": task.to_dict()})

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.ERROR, EventType.COMPLETE)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "data": self.data}
