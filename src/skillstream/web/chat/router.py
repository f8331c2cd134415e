"""Chat routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from ..deps import Orchestrator
from . import service

router = APIRouter(tags=["chat"])


@router.post("/")
@router.post("/chat")
async def chat(request: Request, orchestrator: Orchestrator):
    chat_request = await service.parse_chat_request(request)
    orchestrator.ensure_configured(chat_request)
    task = orchestrator.create_task(chat_request)

    if not chat_request.stream:
        chunks = await service.collect_events(orchestrator, task.id, chat_request)
        return {"task": task.to_dict(), "chunks": chunks}

    return EventSourceResponse(
        service.stream_events(orchestrator, task.id, chat_request),
        sep="\n",
    )
