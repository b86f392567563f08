"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from hubcloud_extractor.application.use_cases import ExtractStreamLinksUseCase
from hubcloud_extractor.infrastructure.hubcloud import (
    HubcloudExtractor,
    HubcloudFetcher,
)
from hubcloud_extractor.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP Client (shared by every upstream request)
        2. Extractor (fetcher + classifier on top of the client)
        3. Use case (deadline handling around the extractor)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client; connection limits bound total outbound fetches
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        limits=httpx.Limits(max_connections=config.http_max_connections),
        max_redirects=config.http_max_redirects,
    )
    log.info(
        "http_client_initialized",
        max_connections=config.http_max_connections,
        max_redirects=config.http_max_redirects,
    )

    # 2) Extractor
    fetcher = HubcloudFetcher(state.http_client, timeout=config.http_timeout_seconds)
    state.link_extractor = HubcloudExtractor(
        fetcher,
        max_concurrent_resolves=config.extract_max_concurrent_resolves,
    )

    # 3) Use case
    state.extract_uc = ExtractStreamLinksUseCase(
        extractor=state.link_extractor,
        timeout_seconds=config.extract_timeout_seconds,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
