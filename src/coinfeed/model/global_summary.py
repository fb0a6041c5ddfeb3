"""
Global market summary domain model.

Aggregate market figures reported by a provider. Dominance is stored in
percent; the mapping is partial and need not sum to 100.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.coinfeed.domain.primitives import Percentage, UsdAmount


class GlobalSummary(BaseModel):
    """Aggregate market snapshot."""

    model_config = ConfigDict(frozen=True)

    total_market_cap_usd: float = Field(..., ge=0.0)
    total_volume_usd: float = Field(..., ge=0.0)
    market_cap_percent_by_asset: dict[str, float] = Field(
        default_factory=dict,
        description="Lowercased asset symbol -> dominance in percent",
    )
    market_cap_change_percent_24h: float | None = Field(
        default=None, description="Not every provider supplies this"
    )

    @field_validator("market_cap_percent_by_asset")
    @classmethod
    def lower_keys(cls, v: dict[str, float]) -> dict[str, float]:
        return {key.strip().lower(): value for key, value in v.items()}

    def dominance(self, symbol: str) -> float | None:
        """Market cap dominance of an asset in percent, if reported."""
        return self.market_cap_percent_by_asset.get(symbol.strip().lower())

    def dominance_fraction(self, symbol: str) -> float | None:
        """Market cap dominance as a fraction (53.2% -> 0.532)."""
        pct = self.dominance(symbol)
        if pct is None:
            return None
        return Percentage(value=pct).as_fraction()

    def format_summary(self) -> str:
        """Format the market cap / volume / dominance chips as one line."""
        parts = [
            f"Market Cap {UsdAmount(value=self.total_market_cap_usd)}",
            f"24h Volume {UsdAmount(value=self.total_volume_usd)}",
        ]
        for asset in ("btc", "eth"):
            pct = self.dominance(asset)
            shown = Percentage(value=pct).format_display() if pct is not None else "--"
            parts.append(f"{asset.upper()} Dominance {shown}")
        if self.market_cap_change_percent_24h is not None:
            change = Percentage(value=self.market_cap_change_percent_24h)
            parts.append(f"24h Change {change.format_signed()}")
        return " | ".join(parts)
