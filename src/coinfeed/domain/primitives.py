"""
Domain primitives for market data.

These primitives give semantic meaning and display behavior to the plain
floats carried by the models, and own the unit conversions that adapters
apply at the provider boundary.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Assets quoted with two decimals; everything else gets four.
MAJOR_PRICE_SYMBOLS = ("BTC", "ETH", "SOL")

_ABBREVIATIONS = (
    (1_000_000_000_000.0, "T"),
    (1_000_000_000.0, "B"),
    (1_000_000.0, "M"),
    (1_000.0, "K"),
)


class UsdAmount(BaseModel):
    """
    A non-negative US dollar amount such as a market cap or volume.

    Formats either in full or abbreviated (``$1.23T``) form.
    """

    value: float = Field(ge=0.0, description="Amount in USD")

    model_config = ConfigDict(frozen=True)

    def format_display(self) -> str:
        """Format with thousands separators and no cents."""
        return f"${self.value:,.0f}"

    def format_abbreviated(self, decimals: int = 2) -> str:
        """Format with a magnitude suffix (K, M, B, T)."""
        for threshold, suffix in _ABBREVIATIONS:
            if self.value >= threshold:
                return f"${self.value / threshold:.{decimals}f}{suffix}"
        return f"${self.value:.{decimals}f}"

    def __str__(self) -> str:
        """String representation."""
        return self.format_abbreviated()


class Price(BaseModel):
    """
    A coin's USD price, formatted according to the asset it belongs to.
    """

    value: float = Field(ge=0.0, description="Price in USD")
    symbol: str = Field(default="", description="Asset the price belongs to")

    model_config = ConfigDict(frozen=True)

    @property
    def display_decimals(self) -> int:
        """Number of decimals shown for this asset."""
        upper = self.symbol.upper()
        if any(major in upper for major in MAJOR_PRICE_SYMBOLS):
            return 2
        return 4

    def format_display(self) -> str:
        """Format price for display."""
        return f"${self.value:,.{self.display_decimals}f}"

    def __str__(self) -> str:
        """String representation."""
        return self.format_display()


class Percentage(BaseModel):
    """
    Represents a percentage value (50 = 50%).

    Percent is the canonical unit for changes and dominance figures.
    Providers that report fractions convert with ``from_fraction``.
    """

    value: float = Field(description="Percentage value (50 = 50%)")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_fraction(cls, fraction: float) -> Percentage:
        """Build from a fraction (0.5 -> 50%)."""
        return cls(value=fraction * 100.0)

    def as_fraction(self) -> float:
        """Convert to a fraction (50% -> 0.5)."""
        return self.value / 100.0

    @property
    def is_positive(self) -> bool:
        """Zero counts as positive, matching the green/red display rule."""
        return self.value >= 0

    def format_display(self, decimals: int = 2) -> str:
        """Format percentage for display."""
        return f"{self.value:.{decimals}f}%"

    def format_signed(self, decimals: int = 2) -> str:
        """Format with an explicit sign (``+2.45%``)."""
        sign = "+" if self.is_positive else ""
        return f"{sign}{self.value:.{decimals}f}%"

    def __str__(self) -> str:
        """String representation."""
        return self.format_display()
