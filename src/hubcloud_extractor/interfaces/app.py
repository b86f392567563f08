"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.responses import Response

from hubcloud_extractor import __version__
from hubcloud_extractor.infrastructure.config import AppConfig
from hubcloud_extractor.interfaces.app_state import AppState
from hubcloud_extractor.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

_BANNER = "Hubcloud Extractor API is running. Use /api/hubcloud?url=YOUR_LINK"


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, extractor) are created in lifespan().
    """
    app = FastAPI(
        title="Hubcloud Extractor",
        description="Resolves hubcloud landing pages into direct stream links",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from hubcloud_extractor.interfaces.api.hubcloud import router as hubcloud_router

    app.include_router(hubcloud_router, prefix="/api")

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return _BANNER

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        """Liveness probe; returns 200 as long as the process is running."""
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
