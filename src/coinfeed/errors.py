"""
Error taxonomy for the aggregation core.

Provider errors are raised by adapters and stop at the aggregator boundary,
where they are turned into snapshot state. Cache misses are not errors: the
local store answers ``None``.
"""

from __future__ import annotations

from src.coinfeed.enums import ProviderErrorKind


class CoinfeedError(Exception):
    """Base class for all errors raised by this package."""


class ProviderError(CoinfeedError):
    """An upstream market-data provider could not answer."""

    kind: ProviderErrorKind = ProviderErrorKind.NETWORK

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class NetworkError(ProviderError):
    """Timeout, connection failure or unexpected HTTP status."""

    kind = ProviderErrorKind.NETWORK


class DecodeError(ProviderError):
    """Response body is not JSON or does not match the expected shape."""

    kind = ProviderErrorKind.DECODE


class RateLimitedError(ProviderError):
    """Provider answered HTTP 429."""

    kind = ProviderErrorKind.RATE_LIMITED

    def __init__(
        self, provider: str, message: str, retry_after: float | None = None
    ) -> None:
        super().__init__(provider, message)
        self.retry_after = retry_after


class StoreWriteError(CoinfeedError):
    """A local store write failed; the previously stored value is intact."""
