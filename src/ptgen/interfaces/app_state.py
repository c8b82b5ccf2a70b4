"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from ptgen.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from ptgen.application.use_cases import (
        DirectLookupUseCase,
        QueryRouter,
        SearchDispatchUseCase,
        UrlDispatchUseCase,
    )
    from ptgen.domain.ports import ArchivePort, CachePort
    from ptgen.infrastructure.providers import ProviderRegistry


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort | None
    http_client: httpx.AsyncClient
    archive: ArchivePort | None

    # Providers (one registry for URL and by-id dispatch)
    providers: ProviderRegistry

    # Application services
    url_dispatch: UrlDispatchUseCase
    direct_lookup: DirectLookupUseCase
    search: SearchDispatchUseCase
    query_router: QueryRouter
