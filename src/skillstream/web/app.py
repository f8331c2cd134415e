"""FastAPI app factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core import defaults as D
from ..core.cache import TTLCache
from ..core.config import AppConfig
from ..core.errors import NotFoundError, SkillstreamError
from ..core.models import now_ms
from ..core.orchestrator import TaskOrchestrator
from ..skills.registry import default_skill_registry
from ..tools.builtin import default_tool_registry
from ..tools.client import ToolClient
from .deps import Config, Orchestrator

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

_STATUS_CODES = {400: "VALIDATION_ERROR", 405: "METHOD_NOT_ALLOWED"}


def _cors_headers(config: AppConfig) -> dict[str, str]:
    origin = "*" if "*" in config.cors_origins else ", ".join(config.cors_origins)
    return {"Access-Control-Allow-Origin": origin, **CORS_HEADERS}


def create_app(
    config: AppConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
    tools: ToolClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Server configuration; loaded from file/env when omitted.
        http_client: Client for upstream providers. When omitted the app
            creates one and closes it on shutdown.
        tools: Tool client; defaults to the built-in tools with a fresh cache.
    """
    config = config or AppConfig.load()
    owns_client = http_client is None
    # Built eagerly: ASGITransport in tests doesn't trigger lifespan
    http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(config.request_timeout))
    tools = tools or ToolClient(
        default_tool_registry(),
        TTLCache(
            default_ttl=config.tool_cache_ttl,
            max_entries=D.DEFAULT_TOOL_CACHE_MAX_ENTRIES,
            max_size=D.DEFAULT_TOOL_CACHE_MAX_SIZE,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving with providers: %s", config.features())
        yield
        if owns_client:
            await http.aclose()

    app = FastAPI(
        title="Skillstream",
        description="Task/step streaming chat orchestrator",
        version=D.VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.orchestrator = TaskOrchestrator(
        config, http, default_skill_registry(config), tools
    )
    cors = _cors_headers(config)

    # CORS preflight + request logging
    @app.middleware("http")
    async def cors_and_logging(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=cors)

        start = time.perf_counter()
        response = await call_next(request)
        response.headers.update(cors)
        logger.info(
            "%s %s -> %d (%.0fms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    # Error handlers
    @app.exception_handler(SkillstreamError)
    async def skillstream_error_handler(request: Request, exc: SkillstreamError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=cors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error: SkillstreamError = NotFoundError(f"Route {request.method} {request.url.path}")
        else:
            error = SkillstreamError(
                str(exc.detail),
                code=_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
                status_code=exc.status_code,
            )
        return JSONResponse(status_code=exc.status_code, content=error.to_dict(), headers=cors)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = SkillstreamError("Internal server error")
        return JSONResponse(status_code=500, content=error.to_dict(), headers=cors)

    from .chat.router import router as chat_router

    app.include_router(chat_router)

    @app.get("/health")
    async def health(cfg: Config):
        return {
            "status": "ok",
            "timestamp": now_ms(),
            "version": D.VERSION,
            "features": cfg.features(),
        }

    @app.get("/stats")
    async def stats(orchestrator: Orchestrator):
        return {"tasks": orchestrator.get_stats(), "timestamp": now_ms()}

    return app
