"""URL dispatch use case: arbitrary media URL -> formatted media record."""

from __future__ import annotations

from dataclasses import replace

import structlog

from ptgen.application.use_cases.cache_aside import CacheAsideExecutor
from ptgen.domain.entities import (
    InvalidProviderURLError,
    MediaRecord,
    UnsupportedURLError,
    resource_id,
)
from ptgen.domain.ports import ProviderPort, ProviderRegistryPort

log = structlog.get_logger(__name__)


def attach_format(provider: ProviderPort, record: MediaRecord) -> MediaRecord:
    """Render ``format`` for a successful record (fresh or cached).

    The text is recomputed on every read so formatter changes apply to
    records cached before the change.
    """
    if not record.success:
        return record
    return replace(record, format=provider.format(record))


class UrlDispatchUseCase:
    """Routes an input URL to its provider through the cache.

    Flow:
        1. First provider (registration order) whose domain occurs in the URL
        2. Provider pattern -> canonical identifier
        3. resource id = ``{provider}_{identifier with / -> _}``
        4. Cache-aside generation
        5. ``format`` attached on every successful return
    """

    def __init__(
        self,
        providers: ProviderRegistryPort,
        executor: CacheAsideExecutor,
    ) -> None:
        self.providers = providers
        self.executor = executor

    async def execute(self, url: str) -> MediaRecord:
        """Raises:
        UnsupportedURLError: No provider domain occurs in *url*.
        InvalidProviderURLError: The domain matched but the pattern did not.
        """
        provider = self.providers.find_by_url(url)
        if provider is None:
            raise UnsupportedURLError(url)

        sid = provider.matches(url)
        if sid is None:
            raise InvalidProviderURLError(provider.name, url)

        key = resource_id(provider.name, sid)
        log.info("url_dispatch", provider=provider.name, sid=sid, resource_id=key)

        record = await self.executor.run(key, lambda: provider.generate(sid))
        return attach_format(provider, record)
