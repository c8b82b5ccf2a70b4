from .errors import (
    DuplicateProviderError,
    InvalidParametersError,
    InvalidProviderURLError,
    MediaRequestError,
    ProviderError,
    ProviderNotFoundError,
    UnsupportedSourceError,
    UnsupportedURLError,
)
from .media import NONE_EXIST_ERROR, MediaRecord, decode_identifier, resource_id
from .search import NO_RESULTS_ERROR, MediaSummary, SearchOutcome

__all__ = [
    "NONE_EXIST_ERROR",
    "NO_RESULTS_ERROR",
    "DuplicateProviderError",
    "InvalidParametersError",
    "InvalidProviderURLError",
    "MediaRecord",
    "MediaRequestError",
    "MediaSummary",
    "ProviderError",
    "ProviderNotFoundError",
    "SearchOutcome",
    "UnsupportedSourceError",
    "UnsupportedURLError",
    "decode_identifier",
    "resource_id",
]
