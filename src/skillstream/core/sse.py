"""Server-Sent Events framing helpers.

Used on both sides of the wire: skills parse the upstream provider's
stream, the transport writes frames, and the client consumer parses them
back.
"""

from __future__ import annotations

import codecs
import json
from typing import Any

DONE = "[DONE]"
DATA_PREFIX = "data:"


class SSELineBuffer:
    """Splits a chunked byte/text stream into complete lines.

    A read may end mid-line (or mid-character); the unterminated remainder
    is carried over and prefixed onto the next read.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, data: bytes | str) -> list[str]:
        """Add a chunk and return the lines it completed."""
        if isinstance(data, bytes):
            data = self._decoder.decode(data)
        self._buffer += data
        *lines, self._buffer = self._buffer.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Return the trailing unterminated line, if any, and reset."""
        rest = (self._buffer + self._decoder.decode(b"", final=True)).strip()
        self._buffer = ""
        return [rest] if rest else []


def parse_data_line(line: str) -> str | None:
    """Extract the payload of a ``data:`` line.

    Returns None for blank lines, comments, and other SSE fields.
    """
    trimmed = line.strip()
    if not trimmed.startswith(DATA_PREFIX):
        return None
    payload = trimmed[len(DATA_PREFIX) :]
    return payload[1:] if payload.startswith(" ") else payload


def parse_json_payload(payload: str) -> dict[str, Any] | None:
    """Decode a JSON object payload, or None if it is malformed."""
    try:
        value = json.loads(payload)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def extract_delta(chunk: dict[str, Any], *, allow_message: bool = False) -> str | None:
    """Pull ``choices[0].delta.content`` out of an OpenAI-style chunk.

    Args:
        chunk: Decoded provider chunk.
        allow_message: Also accept ``choices[0].message.content`` (some
            providers send a full message on the last chunk).
    """
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    choice = choices[0]
    keys = ("delta", "message") if allow_message else ("delta",)
    for key in keys:
        part = choice.get(key)
        if isinstance(part, dict):
            content = part.get("content")
            if isinstance(content, str) and content:
                return content
    return None


def serialize_event(event: dict[str, Any]) -> str:
    """Compact single-line JSON for one frame."""
    # json.dumps escapes newlines inside strings, so the result never spans lines
    return json.dumps(event, separators=(",", ":"), ensure_ascii=False)


def format_frame(payload: str) -> str:
    return f"data: {payload}\n\n"


DONE_FRAME = format_frame(DONE)
