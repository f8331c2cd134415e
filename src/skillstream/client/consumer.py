"""Client stream consumer.

Sends one chat request and turns the SSE response back into Task/Step
objects and content deltas, delivered through callbacks. A user abort is
a silent stop, never an error.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from ..core import defaults as D
from ..core.events import EventType, StepEvent, TaskEvent
from ..core.models import Step, StepType, Task
from ..core.schemas import ChatRequest
from ..core.sse import DONE, SSELineBuffer, parse_data_line, parse_json_payload

logger = logging.getLogger(__name__)

INCOMPLETE_STREAM = "Stream ended before completion"


class StreamOutcome(StrEnum):
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass
class TaskCallbacks:
    """Optional handlers, one per event kind.

    ``on_step_complete`` also receives steps that ended in error (their
    status is ``failed``). Tool (mcp) steps additionally fire
    ``on_tool_call`` / ``on_tool_result``.
    """

    on_task_start: Callable[[Task], None] | None = None
    on_task_update: Callable[[Task], None] | None = None
    on_step_start: Callable[[Step], None] | None = None
    on_step_complete: Callable[[Step], None] | None = None
    on_content: Callable[[str], None] | None = None
    on_error: Callable[[str], None] | None = None
    on_complete: Callable[[Task], None] | None = None
    on_tool_call: Callable[[Step], None] | None = None
    on_tool_result: Callable[[Step], None] | None = None


def _call(handler: Callable[[Any], None] | None, value: Any) -> None:
    if handler is not None:
        handler(value)


class SSEEventDecoder:
    """Incremental decoder from SSE bytes to event dicts.

    Lines split across reads are carried over. ``[DONE]`` sets ``done``
    and produces no event; malformed payloads are skipped.
    """

    def __init__(self) -> None:
        self._lines = SSELineBuffer()
        self.done = False

    def feed(self, data: bytes | str) -> list[dict[str, Any]]:
        return self._decode(self._lines.feed(data))

    def flush(self) -> list[dict[str, Any]]:
        return self._decode(self._lines.flush())

    def _decode(self, lines: list[str]) -> list[dict[str, Any]]:
        events = []
        for line in lines:
            payload = parse_data_line(line)
            if payload is None or self.done:
                continue
            if payload == DONE:
                self.done = True
                continue
            event = parse_json_payload(payload)
            if event is None or "type" not in event:
                logger.warning("Failed to parse SSE data: %.80s", payload)
                continue
            events.append(event)
        return events


_MALFORMED = (KeyError, TypeError, ValueError, AttributeError)


def _route(
    event_type: EventType, data: Any, callbacks: TaskCallbacks
) -> list[tuple[Callable[[Any], None] | None, Any]]:
    if event_type is EventType.TASK:
        task = Task.from_dict(data["task"])
        if data.get("event") == TaskEvent.STARTED:
            return [(callbacks.on_task_start, task)]
        return [(callbacks.on_task_update, task)]
    if event_type is EventType.STEP:
        step = Step.from_dict(data["step"])
        tool = step.type is StepType.MCP
        if data.get("event") == StepEvent.START:
            return [(callbacks.on_step_start, step)] + (
                [(callbacks.on_tool_call, step)] if tool else []
            )
        if data.get("event") in (StepEvent.COMPLETE, StepEvent.ERROR):
            return [(callbacks.on_step_complete, step)] + (
                [(callbacks.on_tool_result, step)] if tool else []
            )
        return []
    if event_type is EventType.CONTENT:
        return [(callbacks.on_content, data.get("content", ""))]
    if event_type is EventType.ERROR:
        return [(callbacks.on_error, data.get("error", "Unknown error"))]
    return [(callbacks.on_complete, Task.from_dict(data["task"]))]


def dispatch_event(event: dict[str, Any], callbacks: TaskCallbacks) -> EventType | None:
    """Route one decoded event to its callback.

    Returns the event type, or None for unknown types and for events whose
    payload does not have the expected shape (both are skipped).
    """
    try:
        event_type = EventType(event["type"])
    except (ValueError, TypeError):
        logger.debug("Ignoring unknown event type %r", event["type"])
        return None
    try:
        calls = _route(event_type, event.get("data") or {}, callbacks)
    except _MALFORMED as e:
        logger.warning("Skipping malformed %s event: %r", event_type, e)
        return None
    for handler, value in calls:
        _call(handler, value)
    return event_type


def _request_body(request: ChatRequest | dict[str, Any], *, stream: bool) -> dict[str, Any]:
    if isinstance(request, ChatRequest):
        body = request.model_dump(by_alias=True, exclude_none=True)
    else:
        body = dict(request)
    body["stream"] = stream
    return body


class TaskStreamClient:
    """HTTP client for the chat endpoint.

    Args:
        base_url: Server URL; requests go to ``POST {base_url}/``.
        http: Optional pre-configured httpx client (not closed by us).
    """

    def __init__(
        self,
        base_url: str = f"http://127.0.0.1:{D.DEFAULT_PORT}",
        http: httpx.AsyncClient | None = None,
        timeout: float = D.DEFAULT_REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> TaskStreamClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def health(self) -> dict[str, Any]:
        response = await self._client.get(f"{self.base_url}/health")
        response.raise_for_status()
        return response.json()

    async def fetch(self, request: ChatRequest | dict[str, Any]) -> dict[str, Any]:
        """Non-streaming request.

        Returns ``{"task": ..., "chunks": [...]}``, or the ``{"error": ...}``
        envelope for a rejected request.
        """
        response = await self._client.post(
            f"{self.base_url}/", json=_request_body(request, stream=False)
        )
        return response.json()

    async def send(
        self,
        request: ChatRequest | dict[str, Any],
        callbacks: TaskCallbacks,
        abort: asyncio.Event | None = None,
    ) -> StreamOutcome:
        """Send a request and dispatch its events until the stream ends.

        Setting ``abort`` cancels the request; no callback fires after that
        point and ``on_error`` is not called for it.
        """
        if abort is not None and abort.is_set():
            return StreamOutcome.ABORTED

        body = _request_body(request, stream=True)
        reader = asyncio.create_task(self._consume(body, callbacks, abort))
        if abort is None:
            return await reader

        waiter = asyncio.create_task(abort.wait())
        try:
            done, _ = await asyncio.wait({reader, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not reader.done():
                reader.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reader

        if reader in done and not reader.cancelled():
            return reader.result()
        logger.info("Request aborted by user")
        return StreamOutcome.ABORTED

    async def _consume(
        self,
        body: dict[str, Any],
        callbacks: TaskCallbacks,
        abort: asyncio.Event | None,
    ) -> StreamOutcome:
        decoder = SSEEventDecoder()
        outcome: StreamOutcome | None = None

        def handle(events: list[dict[str, Any]]) -> bool:
            nonlocal outcome
            for event in events:
                if abort is not None and abort.is_set():
                    return False
                event_type = dispatch_event(event, callbacks)
                if event_type is EventType.COMPLETE:
                    outcome = StreamOutcome.COMPLETED
                elif event_type is EventType.ERROR:
                    outcome = StreamOutcome.FAILED
            return True

        try:
            async with self._client.stream(
                "POST",
                f"{self.base_url}/",
                json=body,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.status_code >= 400:
                    text = (await response.aread()).decode("utf-8", errors="replace")
                    _call(
                        callbacks.on_error,
                        f"HTTP error! status: {response.status_code} - {text}",
                    )
                    return StreamOutcome.FAILED

                async for data in response.aiter_bytes():
                    if not handle(decoder.feed(data)):
                        return StreamOutcome.ABORTED
                    if decoder.done:
                        break
                if not handle(decoder.flush()):
                    return StreamOutcome.ABORTED
        except httpx.HTTPError as e:
            logger.warning("Task stream failed: %s", e)
            if outcome is not None:
                return outcome
            _call(callbacks.on_error, f"Stream failed: {e!r}")
            return StreamOutcome.FAILED

        if outcome is None:
            _call(callbacks.on_error, INCOMPLETE_STREAM)
            return StreamOutcome.FAILED
        return outcome
