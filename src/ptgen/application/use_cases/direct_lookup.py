"""Direct lookup use case: (source, sid) -> formatted media record."""

from __future__ import annotations

import structlog

from ptgen.application.use_cases.cache_aside import CacheAsideExecutor
from ptgen.application.use_cases.url_dispatch import attach_format
from ptgen.domain.entities import (
    MediaRecord,
    ProviderNotFoundError,
    UnsupportedSourceError,
    decode_identifier,
    resource_id,
)
from ptgen.domain.ports import ProviderRegistryPort

log = structlog.get_logger(__name__)


class DirectLookupUseCase:
    """Provider-by-id lookup that bypasses URL domain matching.

    *sid* may carry underscores in place of slashes (``movie_550``), the
    same substitution used in resource ids. The generator receives the
    slash form; the cache key always uses the provider's canonical name,
    so aliases (``bgm``) share entries with their provider (``bangumi``).
    """

    def __init__(
        self,
        providers: ProviderRegistryPort,
        executor: CacheAsideExecutor,
    ) -> None:
        self.providers = providers
        self.executor = executor

    async def execute(self, source: str, sid: str) -> MediaRecord:
        """Raises:
        UnsupportedSourceError: *source* names no provider or alias.
        """
        try:
            provider = self.providers.get(source)
        except ProviderNotFoundError as e:
            raise UnsupportedSourceError(source) from e

        decoded = decode_identifier(str(sid))
        key = resource_id(provider.name, decoded)
        log.info(
            "direct_lookup",
            source=source,
            provider=provider.name,
            sid=decoded,
            resource_id=key,
        )

        record = await self.executor.run(key, lambda: provider.generate(decoded))
        return attach_format(provider, record)
