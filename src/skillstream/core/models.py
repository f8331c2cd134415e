"""Task and Step data models."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TaskType(StrEnum):
    CHAT = "chat"
    CODE = "code"
    IMAGE = "image"
    FILE = "file"


class TaskStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepType(StrEnum):
    PLAN = "plan"
    SKILL = "skill"
    MCP = "mcp"
    THINK = "think"
    RESPOND = "respond"


def generate_id(prefix: str = "") -> str:
    """Return an opaque unique id, optionally prefixed (``task-3f2a...``)."""
    token = secrets.token_hex(8)
    return f"{prefix}-{token}" if prefix else token


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def determine_task_type(*, has_images: bool, has_files: bool, enable_tools: bool) -> TaskType:
    """Derive a task's type from the request shape.

    Images win over files, files over tools; a plain request is a chat.
    """
    if has_images:
        return TaskType.IMAGE
    if has_files:
        return TaskType.FILE
    if enable_tools:
        return TaskType.CODE
    return TaskType.CHAT


@dataclass
class Step:
    """One pipeline stage of a task.

    Steps are created running; they end exactly once, either completed or
    failed.
    """

    task_id: str
    type: StepType
    name: str
    description: str = ""
    id: str = field(default_factory=lambda: generate_id("step"))
    status: StepStatus = StepStatus.RUNNING
    input: Any = None
    output: Any = None
    error: str | None = None
    started_at: int = field(default_factory=now_ms)
    completed_at: int | None = None

    def complete(self, output: Any = None) -> None:
        if self.status is not StepStatus.RUNNING:
            raise ValueError(f"Cannot complete step {self.id} in status {self.status}")
        self.status = StepStatus.COMPLETED
        if output is not None:
            self.output = output
        self.completed_at = now_ms()

    def fail(self, error: str) -> None:
        if self.status is not StepStatus.RUNNING:
            raise ValueError(f"Cannot fail step {self.id} in status {self.status}")
        self.status = StepStatus.FAILED
        self.error = error
        self.completed_at = now_ms()

    @property
    def duration_ms(self) -> int | None:
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step:
        """Rebuild a step from its wire form."""
        return cls(
            task_id=data["taskId"],
            type=StepType(data["type"]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            id=data["id"],
            status=StepStatus(data["status"]),
            input=data.get("input"),
            output=data.get("output"),
            error=data.get("error"),
            started_at=data.get("startedAt", 0),
            completed_at=data.get("completedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "taskId": self.task_id,
                "type": self.type.value,
                "status": self.status.value,
                "name": self.name,
                "description": self.description,
                "input": self.input,
                "output": self.output,
                "error": self.error,
                "startedAt": self.started_at,
                "completedAt": self.completed_at,
            }
        )


# Allowed forward transitions; anything else is rejected.
_TASK_TRANSITIONS: dict[TaskStatus, tuple[TaskStatus, ...]] = {
    TaskStatus.PENDING: (TaskStatus.RUNNING, TaskStatus.FAILED),
    TaskStatus.RUNNING: (TaskStatus.COMPLETED, TaskStatus.FAILED),
    TaskStatus.COMPLETED: (),
    TaskStatus.FAILED: (),
}


@dataclass
class Task:
    """One end-to-end handling of a chat request."""

    type: TaskType
    user_message: str
    id: str = field(default_factory=lambda: generate_id("task"))
    status: TaskStatus = TaskStatus.PENDING
    steps: list[Step] = field(default_factory=list)
    result: str | None = None
    error: str | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    def touch(self) -> None:
        self.updated_at = now_ms()

    def _transition(self, status: TaskStatus) -> None:
        if status not in _TASK_TRANSITIONS[self.status]:
            raise ValueError(f"Task {self.id}: invalid transition {self.status} -> {status}")
        self.status = status
        self.touch()

    def start(self) -> None:
        self._transition(TaskStatus.RUNNING)

    def complete(self, result: str) -> None:
        self.result = result
        self._transition(TaskStatus.COMPLETED)

    def fail(self, error: str) -> None:
        self.error = error
        self._transition(TaskStatus.FAILED)

    def add_step(self, step: Step) -> Step:
        self.steps.append(step)
        self.touch()
        return step

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Rebuild a task (and its steps) from its wire form."""
        return cls(
            type=TaskType(data["type"]),
            user_message=data.get("userMessage", ""),
            id=data["id"],
            status=TaskStatus(data["status"]),
            steps=[Step.from_dict(s) for s in data.get("steps", [])],
            result=data.get("result"),
            error=data.get("error"),
            created_at=data.get("createdAt", 0),
            updated_at=data.get("updatedAt", 0),
            metadata=data.get("metadata") or {},
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "type": self.type.value,
                "status": self.status.value,
                "userMessage": self.user_message,
                "steps": [s.to_dict() for s in self.steps],
                "result": self.result,
                "error": self.error,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "metadata": self.metadata or None,
            }
        )
