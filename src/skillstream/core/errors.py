"""Error types shared by the server, skills, and client."""

from __future__ import annotations

from typing import Any


class SkillstreamError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Render as the ``{"error": {...}}`` response envelope."""
        error: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(SkillstreamError):
    """Raised for malformed requests and missing configuration."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(SkillstreamError):
    """Raised when a route or resource does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class UpstreamError(SkillstreamError):
    """Raised when a model provider answers with an error status."""

    code = "API_ERROR"

    def __init__(self, message: str, provider: str, status_code: int = 502):
        super().__init__(message, status_code=status_code, details={"provider": provider})
        self.provider = provider


class TaskExecutionError(SkillstreamError):
    """Raised inside the orchestrator to abort a task after a failed step."""

    code = "TASK_FAILED"
