"""
Enums for the market-data aggregation core.

This module defines the standardized enum values used throughout the
aggregation system. They are the shared vocabulary between provider
adapters, the aggregator state machine, and whatever renders its output.

"""

from __future__ import annotations

import enum

# =============================================================================
# DATA ORIGIN ENUMS
# =============================================================================


class DataKind(str, enum.Enum):
    """
    Independently refreshed classes of market data.

    Each kind has its own refresh state, source, timestamps and cache file.
    """

    COINS = "coins"
    GLOBAL = "global"


class DataSource(str, enum.Enum):
    """
    Where the currently published data for a kind came from.

    Used by presentation code to decide whether to flag data as stale.
    """

    PRIMARY = "primary"  # Primary provider answered
    FALLBACK = "fallback"  # Primary failed, secondary provider answered
    CACHE = "cache"  # Both providers failed, last-known-good from disk


class RefreshState(str, enum.Enum):
    """
    Refresh state machine values, tracked per data kind.

    SUCCEEDED is qualified by the accompanying DataSource.
    """

    IDLE = "idle"
    REFRESHING = "refreshing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProviderErrorKind(str, enum.Enum):
    """Classification of provider failures."""

    NETWORK = "network"  # Timeout, unreachable, non-2xx status
    DECODE = "decode"  # Body is not JSON or does not match the schema
    RATE_LIMITED = "rate_limited"  # HTTP 429


# =============================================================================
# VIEW ENUMS
# =============================================================================


class Segment(str, enum.Enum):
    """Coin list segments offered by the market screen."""

    ALL = "all"
    FAVORITES = "favorites"
    GAINERS = "gainers"
    LOSERS = "losers"


class SortDirection(str, enum.Enum):
    """Sort direction for the coin list."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    def reversed(self) -> SortDirection:
        """Return the opposite direction."""
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


class SortField(str, enum.Enum):
    """
    Sortable coin list columns.

    Numeric columns naturally sort descending (largest first); text
    columns naturally sort ascending (A to Z).
    """

    MARKET_CAP = "market_cap"
    PRICE = "price"
    DAILY_CHANGE = "daily_change"
    HOURLY_CHANGE = "hourly_change"
    VOLUME = "volume"
    NAME = "name"
    SYMBOL = "symbol"

    @property
    def is_textual(self) -> bool:
        """Whether values in this column are compared as text."""
        return self in {SortField.NAME, SortField.SYMBOL}

    @property
    def natural_direction(self) -> SortDirection:
        """Direction used when the column is first selected."""
        if self.is_textual:
            return SortDirection.ASCENDING
        return SortDirection.DESCENDING
