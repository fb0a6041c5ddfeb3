"""CryptoCompare news headlines client."""

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from src.coinfeed.adapters.http import JsonHttpClient
from src.coinfeed.model.insights import NewsItem

CRYPTOCOMPARE_URL = "https://min-api.cryptocompare.com"


class CryptoCompareArticle(BaseModel):
    title: str
    source: str
    url: str | None = None

    model_config = ConfigDict(extra="ignore")

    def to_news_item(self) -> NewsItem:
        return NewsItem(title=self.title, source=self.source, url=self.url or None)


class CryptoCompareNews(BaseModel):
    """Body of ``/data/v2/news/``; articles live under ``Data``."""

    articles: list[CryptoCompareArticle] = Field(alias="Data")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


_NEWS = TypeAdapter(CryptoCompareNews)


class CryptoCompareNewsClient(JsonHttpClient):
    """Async client for CryptoCompare's public news feed."""

    provider_name = "cryptocompare"

    def __init__(
        self,
        base_url: str = CRYPTOCOMPARE_URL,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)

    async def fetch_news(self, lang: str = "EN") -> list[NewsItem]:
        """Fetch the latest headlines, newest first."""
        payload = await self._get_json("/data/v2/news/", {"lang": lang})
        news = self._decode(_NEWS, payload, "news")
        return [article.to_news_item() for article in news.articles]
