"""HTTP transport: FastAPI app serving the task event stream."""

from .app import create_app

__all__ = ["create_app"]
