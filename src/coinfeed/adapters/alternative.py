"""
alternative.me Fear & Greed index client.

``/fng/`` returns daily readings newest first, with numbers and epoch
timestamps encoded as strings.
"""

from datetime import UTC, datetime

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from src.coinfeed.adapters.http import JsonHttpClient
from src.coinfeed.model.insights import FearGreedHistory, FearGreedReading

FEAR_GREED_URL = "https://api.alternative.me"


class FngEntry(BaseModel):
    """One raw index entry."""

    value: int = Field(..., ge=0, le=100)
    value_classification: str
    timestamp: int

    model_config = ConfigDict(extra="ignore")

    def to_reading(self) -> FearGreedReading:
        return FearGreedReading(
            value=self.value,
            classification=self.value_classification,
            timestamp=datetime.fromtimestamp(self.timestamp, tz=UTC),
        )


class FngResponse(BaseModel):
    data: list[FngEntry]

    model_config = ConfigDict(extra="ignore")


_FNG = TypeAdapter(FngResponse)


class FearGreedClient(JsonHttpClient):
    """Async client for the alternative.me Fear & Greed index."""

    provider_name = "alternative.me"

    def __init__(
        self,
        base_url: str = FEAR_GREED_URL,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)

    async def fetch_index(self, limit: int = 30) -> FearGreedHistory:
        """Fetch the latest ``limit`` daily readings."""
        payload = await self._get_json("/fng/", {"limit": limit})
        response = self._decode(_FNG, payload, "fear & greed")
        return FearGreedHistory(
            readings=tuple(entry.to_reading() for entry in response.data)
        )
