"""Chat service: adapts the orchestrator's event stream to HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from ...core import defaults as D
from ...core.errors import ValidationError
from ...core.events import Event
from ...core.orchestrator import TaskOrchestrator
from ...core.schemas import ChatRequest
from ...core.sse import DONE, serialize_event

logger = logging.getLogger(__name__)


async def parse_chat_request(request: Request) -> ChatRequest:
    """Validate the request body before any task exists.

    Raises:
        ValidationError: On a non-JSON body, an oversized body, or a body
            that does not match ``ChatRequest``.
    """
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise ValidationError(
            "Content-Type must be application/json", details={"contentType": content_type}
        )

    raw_length = request.headers.get("content-length") or "0"
    try:
        content_length = int(raw_length)
    except ValueError:
        raise ValidationError(
            "Invalid Content-Length header", details={"contentLength": raw_length}
        ) from None
    if content_length > D.MAX_REQUEST_BYTES:
        raise ValidationError(
            "Request body too large",
            details={"size": content_length, "maxSize": D.MAX_REQUEST_BYTES},
        )

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body") from None

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    if not body.get("messages"):
        raise ValidationError("messages is required and must not be empty")

    try:
        return ChatRequest.model_validate(body)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise ValidationError(
            f"Invalid request: {field}: {first['msg']}",
            details={"errors": len(e.errors())},
        ) from None


async def stream_events(
    orchestrator: TaskOrchestrator, task_id: str, chat_request: ChatRequest
) -> AsyncIterator[dict[str, str]]:
    """SSE messages for ``EventSourceResponse``, ending with ``[DONE]``.

    An unexpected exception becomes one last error frame. A client
    disconnect closes this generator, which closes the orchestrator's.
    """
    async with aclosing(orchestrator.execute_task(task_id, chat_request)) as events:
        try:
            async for event in events:
                yield {"data": serialize_event(event.to_dict())}
        except Exception as e:
            logger.exception("Stream for task %s failed", task_id)
            yield {"data": serialize_event(Event.error(str(e) or "Internal error").to_dict())}
    yield {"data": DONE}


async def collect_events(
    orchestrator: TaskOrchestrator, task_id: str, chat_request: ChatRequest
) -> list[dict[str, Any]]:
    """Drain the whole event stream for a non-streaming response."""
    async with aclosing(orchestrator.execute_task(task_id, chat_request)) as events:
        return [event.to_dict() async for event in events]
