"""Base class for skills.

A skill calls exactly one upstream provider with ``stream: true`` and
translates the provider's SSE token stream into ``SkillChunk`` values.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, ClassVar

import httpx

from ..core.errors import UpstreamError
from ..core.retry import is_retryable_status, with_retry
from ..core.sse import DONE, SSELineBuffer, extract_delta, parse_data_line, parse_json_payload
from .models import ChunkType, SkillChunk, SkillContext, SkillInput, SkillType

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, UpstreamError):
        return is_retryable_status(error.status_code)
    return isinstance(error, httpx.TransportError)


class BaseSkill(ABC):
    """Abstract base class for all skills.

    Subclasses choose the provider (class attributes) and shape the
    provider messages (``build_messages``); they may post-process the
    delta stream by overriding ``transform``.
    """

    name: ClassVar[str] = "base"
    type: ClassVar[SkillType]
    description: ClassVar[str] = ""
    provider: ClassVar[str] = "Upstream"
    # Environment variable named in the "not configured" error
    credential_env: ClassVar[str] = "API_KEY"
    # Accept choices[0].message.content as well as delta.content
    accepts_message_content: ClassVar[bool] = False

    def __init__(self, api_url: str, model: str, api_key: str = ""):
        self.api_url = api_url
        self.model = model
        self.api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def model_for(self, skill_input: SkillInput) -> str:
        return skill_input.model or self.model

    @abstractmethod
    def build_messages(self, skill_input: SkillInput, ctx: SkillContext) -> list[dict[str, Any]]:
        """Provider-ready message list."""

    def build_payload(self, skill_input: SkillInput, ctx: SkillContext) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model_for(skill_input),
            "messages": self.build_messages(skill_input, ctx),
            "stream": True,
            "temperature": skill_input.temperature,
        }
        if skill_input.max_tokens is not None:
            payload["max_tokens"] = skill_input.max_tokens
        return payload

    async def execute(
        self, skill_input: SkillInput, ctx: SkillContext
    ) -> AsyncIterator[SkillChunk]:
        """Run the skill, yielding content chunks then ``complete``.

        On failure exactly one ``error`` chunk is yielded and nothing after.
        """
        if not self.configured:
            yield SkillChunk.failure(f"{self.credential_env} not configured")
            return

        payload = self.build_payload(skill_input, ctx)
        logger.info(
            "Task %s: calling %s model %s", ctx.task_id, self.provider, payload["model"]
        )

        try:
            response = await self._open(payload, ctx)
        except UpstreamError as e:
            logger.warning("Task %s: %s", ctx.task_id, e.message)
            yield SkillChunk.failure(e.message)
            return
        except httpx.HTTPError as e:
            logger.warning("Task %s: %s request failed: %s", ctx.task_id, self.provider, e)
            yield SkillChunk.failure(f"{self.provider} request failed: {e!r}")
            return

        try:
            async for chunk in self.transform(self._deltas(response), skill_input, ctx):
                yield chunk
                if chunk.type is ChunkType.ERROR:
                    return
        except httpx.HTTPError as e:
            logger.warning("Task %s: %s stream failed: %s", ctx.task_id, self.provider, e)
            yield SkillChunk.failure(f"{self.provider} stream failed: {e!r}")
            return
        finally:
            await response.aclose()

        yield SkillChunk.done()

    async def transform(
        self,
        deltas: AsyncIterator[str | SkillChunk],
        skill_input: SkillInput,
        ctx: SkillContext,
    ) -> AsyncIterator[SkillChunk]:
        """Turn raw provider deltas into chunks. Default: one content chunk each."""
        async for delta in deltas:
            yield delta if isinstance(delta, SkillChunk) else SkillChunk.text(delta)

    async def _open(self, payload: dict[str, Any], ctx: SkillContext) -> httpx.Response:
        """Open the upstream stream, retrying only before any byte is consumed."""

        async def attempt() -> httpx.Response:
            request = ctx.http.build_request(
                "POST",
                self.api_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Accept": "text/event-stream",
                },
                timeout=httpx.Timeout(ctx.config.request_timeout),
            )
            response = await ctx.http.send(request, stream=True)
            if response.status_code >= 400:
                body = (await response.aread()).decode("utf-8", errors="replace")
                await response.aclose()
                raise UpstreamError(
                    f"{self.provider} API Error: {body}",
                    provider=self.provider,
                    status_code=response.status_code,
                )
            return response

        return await with_retry(
            attempt,
            attempts=ctx.config.retry_attempts,
            initial_delay=ctx.config.retry_delay,
            retryable=_is_retryable,
        )

    async def _deltas(self, response: httpx.Response) -> AsyncIterator[str | SkillChunk]:
        """Yield content deltas from the provider's SSE body.

        Malformed lines are skipped. A provider-side error object ends the
        stream with an error chunk.
        """
        buffer = SSELineBuffer()
        async for data in response.aiter_bytes():
            for line in buffer.feed(data):
                item = self._parse_line(line)
                if item is _END_OF_STREAM:
                    return
                if item is not None:
                    yield item
                    if isinstance(item, SkillChunk):
                        return
        for line in buffer.flush():
            item = self._parse_line(line)
            if item is not None and item is not _END_OF_STREAM:
                yield item

    def _parse_line(self, line: str) -> Any:
        payload = parse_data_line(line)
        if payload is None or not payload.strip():
            return None
        if payload.strip() == DONE:
            return _END_OF_STREAM
        chunk = parse_json_payload(payload)
        if chunk is None:
            logger.debug("Skipping malformed %s line: %.80s", self.provider, payload)
            return None
        if chunk.get("error"):
            error = chunk["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            return SkillChunk.failure(f"{self.provider} API Error: {message}")
        return extract_delta(chunk, allow_message=self.accepts_message_content)
