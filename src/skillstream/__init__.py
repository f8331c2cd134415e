"""Skillstream: Task -> Step -> Skill streaming chat orchestrator.

A chat request becomes a Task that runs through plan, skill and respond
steps. The selected skill streams tokens from an upstream model provider,
and the server relays everything as one ordered Server-Sent Events stream.

Usage:
    # Server
    $ skillstream serve

    # CLI client
    $ skillstream chat "hello"

    # Python API
    from skillstream import create_app, TaskStreamClient

    app = create_app()
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("skillstream")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


# Core exports (lazy imports for faster startup)
def __getattr__(name: str):
    """Lazy import for main classes."""
    if name == "create_app":
        from .web.app import create_app

        return create_app
    if name == "TaskOrchestrator":
        from .core.orchestrator import TaskOrchestrator

        return TaskOrchestrator
    if name == "AppConfig":
        from .core.config import AppConfig

        return AppConfig
    if name == "TaskStreamClient":
        from .client.consumer import TaskStreamClient

        return TaskStreamClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "create_app",
    "TaskOrchestrator",
    "AppConfig",
    "TaskStreamClient",
]
