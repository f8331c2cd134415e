"""Tests for Task/Step models and task type derivation."""

from __future__ import annotations

import itertools

import pytest

from skillstream.core.models import (
    Step,
    StepStatus,
    StepType,
    Task,
    TaskStatus,
    TaskType,
    determine_task_type,
    generate_id,
)


class TestDetermineTaskType:
    """Task type is a pure function of the request shape."""

    @pytest.mark.parametrize(
        "has_images,has_files,enable_tools,expected",
        [
            (True, True, True, TaskType.IMAGE),
            (True, False, False, TaskType.IMAGE),
            (False, True, True, TaskType.FILE),
            (False, False, True, TaskType.CODE),
            (False, False, False, TaskType.CHAT),
        ],
    )
    def test_priority(self, has_images, has_files, enable_tools, expected):
        result = determine_task_type(
            has_images=has_images, has_files=has_files, enable_tools=enable_tools
        )
        assert result is expected

    def test_same_inputs_same_type_regardless_of_order(self):
        combos = list(itertools.product([True, False], repeat=3))
        first = [determine_task_type(has_images=a, has_files=b, enable_tools=c) for a, b, c in combos]
        second = [
            determine_task_type(has_images=a, has_files=b, enable_tools=c)
            for a, b, c in reversed(combos)
        ]
        assert first == list(reversed(second))


class TestGenerateId:
    def test_prefix(self):
        assert generate_id("task").startswith("task-")

    def test_unique(self):
        assert len({generate_id() for _ in range(100)}) == 100


class TestStep:
    def test_created_running(self):
        step = Step("task-1", StepType.PLAN, "Plan")
        assert step.status is StepStatus.RUNNING
        assert step.completed_at is None
        assert step.duration_ms is None

    def test_complete_sets_output_and_time(self):
        step = Step("task-1", StepType.SKILL, "Run")
        step.complete({"content": "hi"})
        assert step.status is StepStatus.COMPLETED
        assert step.output == {"content": "hi"}
        assert step.completed_at is not None
        assert step.duration_ms >= 0

    def test_cannot_fail_after_complete(self):
        step = Step("task-1", StepType.SKILL, "Run")
        step.complete()
        with pytest.raises(ValueError):
            step.fail("boom")

    def test_cannot_complete_after_fail(self):
        step = Step("task-1", StepType.SKILL, "Run")
        step.fail("boom")
        with pytest.raises(ValueError):
            step.complete()
        assert step.error == "boom"

    def test_to_dict_uses_wire_names_and_drops_unset(self):
        step = Step("task-1", StepType.PLAN, "Plan")
        data = step.to_dict()
        assert data["taskId"] == "task-1"
        assert data["type"] == "plan"
        assert data["status"] == "running"
        assert "completedAt" not in data
        assert "error" not in data

    def test_from_dict_round_trip(self):
        step = Step("task-1", StepType.MCP, "Call calculate", input={"name": "calculate"})
        step.complete({"content": "Result: 4"})
        restored = Step.from_dict(step.to_dict())
        assert restored == step


class TestTask:
    def test_lifecycle(self):
        task = Task(TaskType.CHAT, "hi")
        assert task.status is TaskStatus.PENDING
        task.start()
        assert task.status is TaskStatus.RUNNING
        task.complete("hello")
        assert task.status is TaskStatus.COMPLETED
        assert task.result == "hello"
        assert task.is_terminal

    def test_no_backwards_transition(self):
        task = Task(TaskType.CHAT, "hi")
        task.start()
        task.fail("boom")
        with pytest.raises(ValueError):
            task.start()
        with pytest.raises(ValueError):
            task.complete("late")
        assert task.status is TaskStatus.FAILED

    def test_cannot_complete_pending(self):
        task = Task(TaskType.CHAT, "hi")
        with pytest.raises(ValueError):
            task.complete("x")

    def test_add_step_touches_updated_at(self):
        task = Task(TaskType.CHAT, "hi", created_at=1000)
        assert task.updated_at == 1000
        task.add_step(Step(task.id, StepType.PLAN, "Plan"))
        assert task.updated_at > 1000
        assert len(task.steps) == 1

    def test_to_dict_and_back(self):
        task = Task(TaskType.IMAGE, "what is this?", metadata={"imageCount": 1})
        task.start()
        task.add_step(Step(task.id, StepType.PLAN, "Plan"))
        data = task.to_dict()
        assert data["userMessage"] == "what is this?"
        assert data["steps"][0]["type"] == "plan"
        assert "result" not in data

        restored = Task.from_dict(data)
        assert restored.id == task.id
        assert restored.status is TaskStatus.RUNNING
        assert restored.steps[0].type is StepType.PLAN
        assert restored.metadata == {"imageCount": 1}
