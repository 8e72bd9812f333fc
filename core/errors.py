"""Error taxonomy for outbound provider calls."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for every classified provider failure."""

    retryable: bool = False

    def __init__(self, provider: str, message: str = "") -> None:
        self.provider = provider
        self.message = message or self.__class__.__name__
        super().__init__(f"{provider}: {self.message}")


class ProviderUnavailable(ProviderError):
    """No API key is configured for the provider."""


class ProviderHTTPError(ProviderError):
    """Non-2xx response, or a connection failure when ``status_code`` is None."""

    def __init__(self, provider: str, status_code: int | None, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(provider, message or f"HTTP {status_code}")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code is not None and self.status_code >= 500


class ProviderMalformedResponse(ProviderError):
    """The body could not be parsed or carried none of the expected fields."""


class RequestTimeout(ProviderError):
    retryable = True
