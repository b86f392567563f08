"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

import httpx
from starlette.datastructures import State

from hubcloud_extractor.application.use_cases import ExtractStreamLinksUseCase
from hubcloud_extractor.domain.ports import LinkExtractorPort
from hubcloud_extractor.infrastructure.config import AppConfig


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Domain Ports
    link_extractor: LinkExtractorPort

    # Application Services
    extract_uc: ExtractStreamLinksUseCase
