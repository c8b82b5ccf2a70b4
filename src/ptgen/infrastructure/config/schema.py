"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackendName = Literal["diskcache", "redis", "none"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseSettings):
    """Record cache configuration (backend-agnostic).

    Entries are permanent: there is no TTL setting.
    """

    backend: CacheBackendName = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite), 'redis' or 'none'",
    )

    directory: Path = Field(
        default=Path("./.cache/ptgen"),
        alias="dir",
        description="Diskcache SQLite DB path",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )

    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )

    model_config = SettingsConfigDict(
        env_prefix="PTGEN_CACHE_",  # PTGEN_CACHE_BACKEND, PTGEN_CACHE_REDIS_URL, ...
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class RateLimitConfig(BaseModel):
    """Per-client sliding window for inbound requests."""

    max_requests: int = Field(
        default=30,
        description="Requests accepted per client within one window.",
    )
    window_seconds: float = Field(
        default=60.0,
        description="Sliding window length in seconds.",
    )
    sweep_interval_seconds: float = Field(
        default=10.0,
        description="Minimum seconds between sweeps of idle clients.",
    )

    @field_validator("max_requests")
    @classmethod
    def _validate_max_requests(cls, v: int) -> int:
        if v < 0:
            raise ValueError("rate_limit.max_requests must be >= 0 (0 = disabled)")
        return v

    @field_validator("window_seconds", "sweep_interval_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rate limit intervals must be > 0")
        return v


class ArchiveConfig(BaseModel):
    """Static archive of pre-scraped Douban records."""

    enabled: bool = Field(
        default=False,
        description="Consult the archive before scraping Douban.",
    )
    base_url: str = Field(
        default="https://raw.githubusercontent.com/ourbits/PtGen/main",
        description="Archive root; records live at {base_url}/{site}/{sid}.json",
    )


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/rate_limit/archive).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="ptgen", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )
    author: str = Field(
        default="Hares",
        description="Author shown in the copyright line of every response.",
    )

    # Secrets (env: PTGEN_API_KEY, PTGEN_TMDB_API_KEY, PTGEN_DOUBAN_COOKIE)
    api_key: str | None = Field(
        default=None,
        description="Shared secret required as ?key=... when set.",
    )
    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDB API key (TMDB lookups and search).",
    )
    douban_cookie: str | None = Field(
        default=None,
        description="Cookie header sent to Douban (helps against anti-bot pages).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout for primary content fetches.",
    )
    http_secondary_timeout_seconds: float = Field(
        default=8.0,
        validation_alias=AliasChoices(
            "http_secondary_timeout_seconds",
            AliasPath("http", "secondary_timeout_seconds"),
        ),
        description="Timeout for secondary lookups (awards, ratings).",
    )
    http_search_timeout_seconds: float = Field(
        default=8.0,
        validation_alias=AliasChoices(
            "http_search_timeout_seconds",
            AliasPath("http", "search_timeout_seconds"),
        ),
        description="Shared deadline for the parallel TMDB searches.",
    )
    http_retry_attempts: int = Field(
        default=3,
        validation_alias=AliasChoices(
            "http_retry_attempts",
            AliasPath("http", "retry_attempts"),
        ),
        description="Attempts for secondary lookups (4xx is never retried).",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)

    @field_validator(
        "http_timeout_seconds",
        "http_secondary_timeout_seconds",
        "http_search_timeout_seconds",
    )
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http timeouts must be > 0")
        return v

    @field_validator("http_retry_attempts")
    @classmethod
    def _validate_retry_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_retry_attempts must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.

        Secrets are reported as set/unset only.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "author": self.author,
            "api_key": "***" if self.api_key else None,
            "tmdb_api_key": "***" if self.tmdb_api_key else None,
            "douban_cookie": "***" if self.douban_cookie else None,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "secondary_timeout_seconds": self.http_secondary_timeout_seconds,
                "search_timeout_seconds": self.http_search_timeout_seconds,
                "retry_attempts": self.http_retry_attempts,
                "follow_redirects": self.http_follow_redirects,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "backend": self.cache.backend,
                "dir": str(self.cache.directory),
                "redis_url": self.cache.redis_url,
            },
            "rate_limit": self.rate_limit.model_dump(),
            "archive": self.archive.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read PTGEN_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - PTGEN_API_KEY
    - PTGEN_TMDB_API_KEY
    - PTGEN_HTTP_TIMEOUT_SECONDS
    - PTGEN_RATE_LIMIT_MAX_REQUESTS
    - PTGEN_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="PTGEN_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None
    author: Optional[str] = None

    api_key: Optional[str] = None
    tmdb_api_key: Optional[str] = None
    douban_cookie: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_secondary_timeout_seconds: Optional[float] = None
    http_search_timeout_seconds: Optional[float] = None
    http_retry_attempts: Optional[int] = None
    http_follow_redirects: Optional[bool] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[CacheBackendName] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None

    rate_limit_max_requests: Optional[int] = None
    rate_limit_window_seconds: Optional[float] = None

    archive_enabled: Optional[bool] = None
    archive_base_url: Optional[str] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
