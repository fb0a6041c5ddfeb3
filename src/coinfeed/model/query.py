"""Coin listing query parameters shared by all providers."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CoinQuery(BaseModel):
    """One page of a market-cap ordered coin listing."""

    model_config = ConfigDict(frozen=True)

    # CoinRecord prices and caps are USD
    vs_currency: Literal["usd"] = "usd"
    order: str = "market_cap_desc"
    per_page: int = Field(default=100, ge=1, le=250)
    page: int = Field(default=1, ge=1)
    sparkline: bool = False
    price_change_windows: tuple[str, ...] = ("1h", "24h")

    @property
    def offset(self) -> int:
        """Zero-based index of the first coin on this page."""
        return (self.page - 1) * self.per_page

    def for_page(self, page: int) -> "CoinQuery":
        return CoinQuery.model_validate({**self.model_dump(), "page": page})
