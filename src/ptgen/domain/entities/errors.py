from __future__ import annotations


class MediaRequestError(Exception):
    """Base error for client-side request problems.

    Surfaced to the caller as a ``success: false`` payload (HTTP 200).
    """


class UnsupportedURLError(MediaRequestError):
    def __init__(self, url: str) -> None:
        super().__init__("Unsupported URL")
        self.url = url


class InvalidProviderURLError(MediaRequestError):
    def __init__(self, provider: str, url: str = "") -> None:
        super().__init__(f"Invalid {provider} URL")
        self.provider = provider
        self.url = url


class UnsupportedSourceError(MediaRequestError):
    def __init__(self, source: str) -> None:
        super().__init__(f"Unsupported source: {source}")
        self.source = source


class InvalidParametersError(MediaRequestError):
    def __init__(self) -> None:
        super().__init__(
            "Invalid parameters. Please provide 'url', 'query', or 'source' and 'sid'."
        )


class ProviderError(Exception):
    """Base error for provider registry problems."""


class DuplicateProviderError(ProviderError):
    pass


class ProviderNotFoundError(ProviderError):
    pass
