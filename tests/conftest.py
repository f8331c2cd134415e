"""Shared fixtures: config, a fake upstream provider, and SSE builders."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from skillstream.core.config import AppConfig


def sse(*deltas: str, done: bool = True) -> bytes:
    """Provider-style SSE body with one chunk per delta."""
    frames = [
        f"data: {json.dumps({'choices': [{'delta': {'content': d}}]})}\n\n" for d in deltas
    ]
    if done:
        frames.append("data: [DONE]\n\n")
    return "".join(frames).encode()


class FakeProvider(httpx.AsyncBaseTransport):
    """Upstream model API double.

    Responses are queued in order; each body is a list of byte chunks
    delivered as separate reads. An ``asyncio.Event`` in the list blocks
    the stream until it is set.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list[tuple[int, list]] = []
        self.closed_streams = 0

    def respond(self, status: int = 200, chunks: list | bytes = b"") -> None:
        if isinstance(chunks, bytes):
            chunks = [chunks]
        self._responses.append((status, list(chunks)))

    def stream(self, *deltas: str) -> None:
        """Queue a successful response streaming the given deltas."""
        self.respond(200, sse(*deltas))

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            status, chunks = self._responses.pop(0)
        else:
            status, chunks = 200, [sse()]

        provider = self

        class Body(httpx.AsyncByteStream):
            async def __aiter__(self):
                for chunk in chunks:
                    if isinstance(chunk, asyncio.Event):
                        await chunk.wait()
                        continue
                    yield chunk

            async def aclose(self):
                provider.closed_streams += 1

        return httpx.Response(
            status,
            stream=Body(),
            headers={"content-type": "text/event-stream"},
            request=request,
        )


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps a process-wide exit event bound to one event loop."""
    from sse_starlette.sse import AppStatus

    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield


@pytest.fixture
def config():
    return AppConfig(
        deepseek_api_key="sk-text",
        qwen_api_key="sk-vision",
        text_api_url="https://text.test/chat/completions",
        vision_api_url="https://vision.test/chat/completions",
        retry_attempts=1,
        retry_delay=0.0,
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest_asyncio.fixture
async def http_client(provider):
    async with httpx.AsyncClient(transport=provider) as client:
        yield client


@pytest.fixture
def make_sse():
    return sse
