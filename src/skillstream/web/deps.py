"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..core.config import AppConfig
from ..core.orchestrator import TaskOrchestrator


def _get_orchestrator(request: Request) -> TaskOrchestrator:
    return request.app.state.orchestrator


def _get_config(request: Request) -> AppConfig:
    return request.app.state.config


Orchestrator = Annotated[TaskOrchestrator, Depends(_get_orchestrator)]
Config = Annotated[AppConfig, Depends(_get_config)]
