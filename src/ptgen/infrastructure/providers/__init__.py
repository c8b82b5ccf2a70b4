"""Media metadata providers and their registry."""

from .bangumi import BangumiProvider
from .base import RegexProvider
from .douban import DoubanProvider
from .imdb import ImdbProvider
from .melon import MelonProvider
from .registry import ProviderRegistry
from .steam import SteamProvider
from .tmdb import TmdbProvider

__all__ = [
    "BangumiProvider",
    "DoubanProvider",
    "ImdbProvider",
    "MelonProvider",
    "ProviderRegistry",
    "RegexProvider",
    "SteamProvider",
    "TmdbProvider",
]
