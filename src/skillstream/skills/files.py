"""Folding attached files into the message history."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from ..core.schemas import FileData

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "markdown", "csv", "json", "xml", "yaml", "yml",
        "js", "ts", "jsx", "tsx", "py", "java", "c", "cpp", "h", "hpp",
        "html", "css", "scss", "less", "go", "rs", "rb", "php", "swift",
        "kt", "sql", "sh", "bash", "ps1", "log", "conf", "ini", "env",
    }
)  # fmt: skip

FILE_ANALYSIS_PROMPT = (
    "You are a file analysis assistant. The user has attached one or more files, "
    "shown below as fenced blocks. Read them carefully and answer the user's "
    "question about their contents. Quote file names when referring to them."
)


def file_extension(name: str) -> str:
    return PurePosixPath(name).suffix.lstrip(".").lower()


def is_supported_text_file(name: str) -> bool:
    """Whether the file extension is a known text format."""
    return file_extension(name) in TEXT_EXTENSIONS


def render_file(file: FileData) -> str:
    return f"### File: {file.name}\n```{file_extension(file.name)}\n{file.content}\n```"


def fold_files(messages: list[dict[str, Any]], files: list[FileData]) -> list[dict[str, Any]]:
    """Prepend rendered files to the last user message.

    Adds the file analysis system prompt. Returns a new list; ``messages``
    is not modified. Without files the messages come back unchanged.
    """
    if not files:
        return list(messages)

    for file in files:
        if not is_supported_text_file(file.name):
            logger.info("Folding file %s with unrecognized type %s", file.name, file.mime_type)

    folded = [dict(m) for m in messages]
    rendered = "\n\n".join(render_file(f) for f in files)
    for message in reversed(folded):
        if message["role"] == "user":
            message["content"] = f"{rendered}\n\n{message['content']}"
            break
    else:
        folded.append({"role": "user", "content": rendered})

    return [{"role": "system", "content": FILE_ANALYSIS_PROMPT}, *folded]
