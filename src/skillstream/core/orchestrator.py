"""Task orchestrator.

Drives one Task through plan -> skill -> respond and emits the ordered
event stream the transport writes out. Tasks live in memory for the
lifetime of the process.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

import httpx

from ..skills.base import BaseSkill
from ..skills.files import fold_files
from ..skills.models import ChunkType, SkillContext, SkillInput, SkillType
from ..skills.registry import SkillRegistry, select_skill
from ..tools.client import ToolClient
from . import defaults as D
from .config import AppConfig
from .errors import TaskExecutionError, ValidationError
from .events import Event, StepEvent, TaskEvent
from .models import Step, StepStatus, StepType, Task, TaskStatus, determine_task_type
from .schemas import ChatRequest

logger = logging.getLogger(__name__)

CANCELLED = "Task cancelled"


class TaskOrchestrator:
    """Owns the Task -> Step state machine.

    Each task is mutated only by its own ``execute_task`` iteration, so
    concurrent tasks share nothing but the tool client's cache.
    """

    def __init__(
        self,
        config: AppConfig,
        http: httpx.AsyncClient,
        skills: SkillRegistry,
        tools: ToolClient | None = None,
    ):
        self.config = config
        self.http = http
        self.skills = skills
        self.tools = tools
        # Insertion order doubles as age order for eviction
        self._tasks: dict[str, Task] = {}

    # --- Registry ---

    def create_task(self, request: ChatRequest) -> Task:
        """Create and track a pending task for a validated request."""
        self._evict_if_full()
        user_message = next(
            (m.content for m in reversed(request.messages) if m.role == "user"), ""
        )
        task = Task(
            type=determine_task_type(
                has_images=bool(request.images),
                has_files=bool(request.files),
                enable_tools=request.enable_tools,
            ),
            user_message=user_message,
            metadata={
                "messageCount": len(request.messages),
                "imageCount": len(request.images),
                "fileCount": len(request.files),
            },
        )
        self._tasks[task.id] = task
        logger.info("Created task %s (%s)", task.id, task.type)
        return task

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def delete_task(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    def get_stats(self) -> dict[str, int]:
        stats = {"total": len(self._tasks)}
        for status in TaskStatus:
            stats[status.value] = sum(1 for t in self._tasks.values() if t.status is status)
        return stats

    def _evict_if_full(self) -> None:
        if len(self._tasks) < self.config.max_tasks:
            return
        oldest = list(self._tasks)[: max(1, int(self.config.max_tasks * D.TASK_EVICTION_RATIO))]
        evicted = [tid for tid in oldest if self._tasks[tid].is_terminal]
        for task_id in evicted:
            del self._tasks[task_id]
        logger.debug("Evicted %d finished tasks", len(evicted))

    # --- Validation ---

    def ensure_configured(self, request: ChatRequest) -> None:
        """Fail fast when a provider the request needs has no credential.

        Raises:
            ValidationError: If the text provider, or the vision provider for
                requests with images, is not configured.
        """
        needed = [self.skills.get(SkillType.TEXT)]
        if request.images:
            needed.append(self.skills.get(SkillType.MULTIMODAL))
        for skill in needed:
            if not skill.configured:
                raise ValidationError(f"Service not configured: missing {skill.credential_env}")

    # --- Execution ---

    async def execute_task(self, task_id: str, request: ChatRequest) -> AsyncIterator[Event]:
        """Run a task, yielding events until exactly one terminal event.

        The sequence always ends with ``complete`` or ``error``.
        """
        task = self._tasks.get(task_id)
        if task is None:
            yield Event.error("Task not found")
            return
        if task.status is TaskStatus.RUNNING:
            yield Event.error("Task is already running", task)
            return
        if task.is_terminal:
            yield Event.error("Task has already been executed", task)
            return

        task.start()
        try:
            yield Event.task(task, TaskEvent.STARTED)
            skill = select_skill(self.skills, has_images=bool(request.images))

            plan = task.add_step(
                Step(task.id, StepType.PLAN, "Plan", "Analyze the request and choose a skill")
            )
            yield Event.step(plan, StepEvent.START)
            plan.complete(
                {
                    "needsMultimodal": bool(request.images),
                    "needsTools": request.enable_tools,
                    "skill": skill.name,
                }
            )
            yield Event.step(plan, StepEvent.COMPLETE)

            parts: list[str] = []
            async with aclosing(self._run_skill(task, skill, request, parts)) as events:
                async for event in events:
                    yield event

            respond = task.add_step(
                Step(task.id, StepType.RESPOND, "Respond", "Assemble the final answer")
            )
            yield Event.step(respond, StepEvent.START)
            result = "".join(parts)
            respond.complete({"content": result})
            task.complete(result)
            yield Event.step(respond, StepEvent.COMPLETE)
            logger.info("Task %s completed (%d chars)", task.id, len(result))
            yield Event.complete(task)

        except TaskExecutionError as e:
            self._abort(task, e.message)
            logger.warning("Task %s failed: %s", task.id, e.message)
            yield Event.error(e.message, task)
        except (GeneratorExit, asyncio.CancelledError):
            self._abort(task, CANCELLED)
            logger.info("Task %s cancelled by client", task.id)
            raise
        except Exception as e:
            logger.exception("Task %s crashed", task.id)
            self._abort(task, str(e) or type(e).__name__)
            yield Event.error(task.error or "Internal error", task)

    async def _run_skill(
        self, task: Task, skill: BaseSkill, request: ChatRequest, parts: list[str]
    ) -> AsyncIterator[Event]:
        skill_input = SkillInput.from_request(
            request, fold_files(request.message_dicts(), request.files)
        )
        step = task.add_step(
            Step(
                task.id,
                StepType.SKILL,
                f"Run {skill.name} skill",
                skill.description,
                input={
                    "skill": skill.name,
                    "provider": skill.provider,
                    "model": skill.model_for(skill_input),
                },
            )
        )
        yield Event.step(step, StepEvent.START)

        ctx = SkillContext(task.id, step.id, self.config, self.http, self.tools)
        tool_steps: dict[str, Step] = {}

        async with aclosing(skill.execute(skill_input, ctx)) as chunks:
            async for chunk in chunks:
                if chunk.type is ChunkType.CONTENT:
                    parts.append(chunk.content)
                    yield Event.content(chunk.content)
                elif chunk.type is ChunkType.TOOL_CALL:
                    call = chunk.tool_call
                    tool_step = task.add_step(
                        Step(
                            task.id,
                            StepType.MCP,
                            f"Call {call.name}",
                            call.to_context(),
                            input=call.to_dict(),
                        )
                    )
                    tool_steps[call.id] = tool_step
                    yield Event.step(tool_step, StepEvent.START)
                elif chunk.type is ChunkType.TOOL_RESULT:
                    result = chunk.tool_result
                    tool_step = tool_steps.pop(result.tool_call_id, None)
                    if tool_step is not None:
                        # A failed tool is reported to the model, not fatal to the task
                        tool_step.complete(result.to_dict())
                        yield Event.step(tool_step, StepEvent.COMPLETE)
                elif chunk.type is ChunkType.ERROR:
                    error = chunk.error or "Skill failed"
                    step.fail(error)
                    yield Event.step(step, StepEvent.ERROR)
                    raise TaskExecutionError(error)
                elif chunk.type is ChunkType.COMPLETE:
                    break

        step.complete(
            {
                "skill": skill.name,
                "provider": skill.provider,
                "model": skill.model_for(skill_input),
                "content": "".join(parts),
            }
        )
        yield Event.step(step, StepEvent.COMPLETE)

    @staticmethod
    def _abort(task: Task, error: str) -> None:
        for step in task.steps:
            if step.status is StepStatus.RUNNING:
                step.fail(error)
        if not task.is_terminal:
            task.fail(error)
