"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from ptgen.application.use_cases import (
    CacheAsideExecutor,
    DirectLookupUseCase,
    QueryRouter,
    SearchDispatchUseCase,
    UrlDispatchUseCase,
)
from ptgen.domain.ports import ArchivePort
from ptgen.infrastructure.archive import StaticArchive
from ptgen.infrastructure.cache import create_cache
from ptgen.infrastructure.config import AppConfig
from ptgen.infrastructure.providers import (
    BangumiProvider,
    DoubanProvider,
    ImdbProvider,
    MelonProvider,
    ProviderRegistry,
    SteamProvider,
    TmdbProvider,
)
from ptgen.infrastructure.search import ImdbSearchBackend, TmdbSearchBackend
from ptgen.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_registry(
    client: httpx.AsyncClient,
    config: AppConfig,
    archive: ArchivePort | None = None,
) -> ProviderRegistry:
    """All providers, in URL tie-break order."""
    common = {
        "timeout": config.http_timeout_seconds,
        "secondary_timeout": config.http_secondary_timeout_seconds,
        "retry_attempts": config.http_retry_attempts,
    }
    return ProviderRegistry(
        [
            DoubanProvider(client, cookie=config.douban_cookie, archive=archive, **common),
            ImdbProvider(client, **common),
            TmdbProvider(client, api_key=config.tmdb_api_key, **common),
            MelonProvider(client, **common),
            BangumiProvider(client, **common),
            SteamProvider(client, **common),
        ]
    )


def build_query_router(
    state: AppState,
    config: AppConfig,
) -> QueryRouter:
    """Wire use cases onto *state* (cache, client, archive already set)."""
    state.providers = build_registry(state.http_client, config, state.archive)
    executor = CacheAsideExecutor(state.cache)
    state.url_dispatch = UrlDispatchUseCase(state.providers, executor)
    state.direct_lookup = DirectLookupUseCase(state.providers, executor)
    state.search = SearchDispatchUseCase(
        {
            "imdb": ImdbSearchBackend(state.http_client, timeout=config.http_timeout_seconds),
            "tmdb": TmdbSearchBackend(
                state.http_client,
                api_key=config.tmdb_api_key,
                timeout=config.http_search_timeout_seconds,
            ),
        }
    )
    return QueryRouter(state.url_dispatch, state.direct_lookup, state.search)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Cache (optional, backend "none" disables it)
        2. HTTP client (shared by providers, search backends, archive)
        3. Archive (optional)
        4. Provider registry + use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Cache
    state.cache = create_cache(
        config.cache.backend,
        directory=str(config.cache.directory),
        redis_url=config.cache.redis_url,
        max_concurrent=config.cache.max_concurrent,
    )
    if state.cache is not None:
        await state.cache.__aenter__()
    log.info("cache_initialized", backend=config.cache.backend)

    # 2) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout_seconds=config.http_timeout_seconds)

    # 3) Archive
    state.archive = None
    if config.archive.enabled:
        state.archive = StaticArchive(
            state.http_client,
            base_url=config.archive.base_url,
            timeout=config.http_secondary_timeout_seconds,
        )
        log.info("archive_enabled", base_url=config.archive.base_url)

    # 4) Providers + use cases
    state.query_router = build_query_router(state, config)
    log.info("providers_registered", providers=state.providers.list_names())

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        if state.cache is not None:
            await state.cache.aclose()
            log.info("cache_closed")

        log.info("app_shutdown_complete")
