from .archive import ArchivePort
from .cache import CachePort
from .provider import ProviderPort, ProviderRegistryPort
from .search_backend import SearchBackendPort

__all__ = [
    "ArchivePort",
    "CachePort",
    "ProviderPort",
    "ProviderRegistryPort",
    "SearchBackendPort",
]
