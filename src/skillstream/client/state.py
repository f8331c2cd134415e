"""Client-side task state rebuilt from the event stream."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.models import Step, StepStatus, Task, now_ms
from .consumer import TaskCallbacks

DEFAULT_STEP_COUNT = 3  # plan, skill, respond


@dataclass
class TaskProgress:
    current: int
    total: int
    percentage: int


@dataclass
class TaskState:
    """Current task, its steps, and pending assistant messages.

    Everything here is derived from events; there is no other source of
    truth.
    """

    current_task: Task | None = None
    current_steps: list[Step] = field(default_factory=list)
    is_processing: bool = False
    error: str | None = None
    # message index -> accumulated content
    pending: dict[int, str] = field(default_factory=dict)
    pending_index: int | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def begin(self, message_index: int) -> TaskCallbacks:
        """Reserve a pending message slot and return callbacks feeding it."""
        self.reset()
        self.pending_index = message_index
        self.pending[message_index] = ""
        return self.callbacks()

    def reset(self) -> None:
        self.current_task = None
        self.current_steps = []
        self.is_processing = False
        self.error = None
        self.pending_index = None

    def start_task(self, task: Task) -> None:
        self.current_task = task
        self.current_steps = []
        self.is_processing = True

    def update_task(self, task: Task) -> None:
        self.current_task = task

    def add_step(self, step: Step) -> None:
        """Insert a step, or replace the one with the same id."""
        for i, existing in enumerate(self.current_steps):
            if existing.id == step.id:
                self.current_steps[i] = step
                return
        self.current_steps.append(step)

    def complete_step(self, step: Step) -> None:
        if step.completed_at is None:
            step.completed_at = now_ms()
        self.add_step(step)

    def append_content(self, content: str) -> None:
        if self.pending_index is not None:
            self.pending[self.pending_index] = self.pending.get(self.pending_index, "") + content

    def finish(self, task: Task) -> None:
        self.current_task = task
        self.is_processing = False

    def fail(self, error: str) -> None:
        self.error = error
        self.is_processing = False

    def step_status(self, step_id: str) -> StepStatus:
        for step in self.current_steps:
            if step.id == step_id:
                return step.status
        return StepStatus.PENDING

    def progress(self) -> TaskProgress:
        if self.current_task is None:
            return TaskProgress(current=0, total=0, percentage=0)
        completed = sum(1 for s in self.current_steps if s.status is StepStatus.COMPLETED)
        total = len(self.current_steps) or DEFAULT_STEP_COUNT
        return TaskProgress(current=completed, total=total, percentage=round(completed / total * 100))

    def current_step_name(self) -> str:
        for step in self.current_steps:
            if step.status is StepStatus.RUNNING:
                return step.name or step.type.value
        return "Processing..."

    def callbacks(self) -> TaskCallbacks:
        return TaskCallbacks(
            on_task_start=self.start_task,
            on_task_update=self.update_task,
            on_step_start=self.add_step,
            on_step_complete=self.complete_step,
            on_content=self.append_content,
            on_error=self.fail,
            on_complete=self.finish,
        )
