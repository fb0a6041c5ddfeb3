"""
Shared async JSON-over-HTTP plumbing for provider adapters.

Every provider adapter issues plain GET requests and parses JSON. This module
owns the parts they share:
- One httpx.AsyncClient per adapter (or an injected one for tests)
- Translation of transport, status and parse failures into ProviderError
- Strict pydantic validation of payloads into raw provider models
"""

import logging
from types import TracebackType
from typing import Any, ClassVar, Self, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from src.coinfeed.errors import DecodeError, NetworkError, RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "coinfeed/0.1"


def _retry_after_seconds(response: httpx.Response) -> float | None:
    """Parse a numeric Retry-After header; HTTP dates are ignored."""
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


class JsonHttpClient:
    """
    Base class for adapters that read JSON from a public REST API.

    Subclasses set ``provider_name`` and call ``_get_json`` / ``_decode``.
    No retries happen here.
    """

    provider_name: ClassVar[str] = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
            http_client: Pre-built client (tests inject a MockTransport);
                not closed by ``aclose``

        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )

    @property
    def name(self) -> str:
        return self.provider_name

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET ``path`` and return the decoded JSON body.

        Raises:
            NetworkError: Timeout, connection failure or non-2xx status
            RateLimitedError: HTTP 429
            DecodeError: Body is not valid JSON

        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{self.name} GET {url} params={params}")

        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise NetworkError(self.name, f"timeout requesting {path}") from e
        except httpx.HTTPError as e:
            raise NetworkError(self.name, f"request to {path} failed: {e}") from e

        if response.status_code == 429:
            retry_after = _retry_after_seconds(response)
            raise RateLimitedError(
                self.name, f"rate limited on {path}", retry_after=retry_after
            )
        if response.is_error:
            raise NetworkError(
                self.name, f"HTTP {response.status_code} from {path}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(self.name, f"invalid JSON from {path}") from e

    def _decode(self, adapter: TypeAdapter[T], payload: Any, what: str) -> T:
        """
        Validate ``payload`` strictly against a raw provider model.

        Raises:
            DecodeError: Payload does not match the expected shape

        """
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise DecodeError(
                self.name, f"unexpected {what} payload: {e.error_count()} error(s)"
            ) from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
