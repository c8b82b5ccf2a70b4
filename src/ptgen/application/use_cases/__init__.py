from .cache_aside import CacheAsideExecutor
from .direct_lookup import DirectLookupUseCase
from .query_router import QueryParams, QueryResult, QueryRouter
from .search_dispatch import SearchDispatchUseCase, is_chinese_text
from .url_dispatch import UrlDispatchUseCase, attach_format

__all__ = [
    "CacheAsideExecutor",
    "DirectLookupUseCase",
    "QueryParams",
    "QueryResult",
    "QueryRouter",
    "SearchDispatchUseCase",
    "UrlDispatchUseCase",
    "attach_format",
    "is_chinese_text",
]
