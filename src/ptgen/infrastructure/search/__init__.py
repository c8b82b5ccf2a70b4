"""Free-text search backends (IMDb, TMDB)."""

from .imdb_search import ImdbSearchBackend
from .tmdb_search import TmdbSearchBackend

__all__ = ["ImdbSearchBackend", "TmdbSearchBackend"]
