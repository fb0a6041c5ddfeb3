"""
Protocol Layer for the Market Data Aggregation Core.

This module defines the structural contracts between the aggregator and its
collaborators. Concrete adapters and stores satisfy them through structure
(duck typing), never through inheritance.

Key design principles:
- Normalized output: providers return domain models, never raw payloads
- Explicit failure: providers raise ProviderError subclasses, nothing else
- Non-fatal reads: stores answer None instead of raising on a cache miss
- No policy in leaves: retries and fallback live in the aggregator
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from src.coinfeed.enums import DataKind
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.query import CoinQuery

# Values a snapshot part may hold, by kind
SnapshotPart = list[CoinRecord] | GlobalSummary


# =============================================================================
# PROVIDER PROTOCOLS
# =============================================================================


@runtime_checkable
class MarketDataProvider(Protocol):
    """
    Protocol for one upstream market-data provider.

    Semantic Role: Source of normalized market data
    Relationships:
    - Used by: MarketAggregator (as primary or fallback)
    - Produces: CoinRecord, GlobalSummary
    - Failure: ProviderError (network, decode, rate limited)

    Implementations perform exactly one upstream call per method and never
    retry; the aggregator owns retry and fallback policy.
    """

    @property
    def name(self) -> str:
        """
        Provider identifier.

        Semantic Role: Provenance label
        Relationships:
        - Used in: Log lines and error messages

        Returns:
            Short lowercase provider name (e.g. "coingecko")

        """
        ...

    async def fetch_coins(self, query: CoinQuery) -> list[CoinRecord]:
        """
        Fetch one page of the coin listing.

        Semantic Role: Coin listing acquisition
        Relationships:
        - Ordering: Provider's market cap ordering is preserved
        - Identity: Every record carries a symbol-derived id

        Args:
            query: Currency, page size, page number and change windows

        Returns:
            Normalized coin records

        Raises:
            ProviderError: On transport, status or shape failure

        """
        ...

    async def fetch_global(self) -> GlobalSummary:
        """
        Fetch aggregate market figures.

        Semantic Role: Market-wide summary acquisition
        Relationships:
        - Units: Dominance converted to percent at this boundary
        - Optionality: Missing 24h change stays None

        Returns:
            Normalized global summary

        Raises:
            ProviderError: On transport, status or shape failure

        """
        ...


# =============================================================================
# STORAGE PROTOCOLS
# =============================================================================


@runtime_checkable
class SnapshotStore(Protocol):
    """
    Protocol for durable last-known-good and preference storage.

    Semantic Role: Offline survival and user state persistence
    Relationships:
    - Owned by: MarketAggregator (injected, never global)
    - Stores: Coin list, global summary, user preferences
    - Guarantees: Atomic writes; reads never raise

    """

    def save_snapshot_part(
        self, kind: DataKind, value: SnapshotPart, *, page: int | None = None
    ) -> None:
        """
        Persist the last good value for a data kind.

        ``page`` records which listing page a coin list came from.

        Raises:
            StoreWriteError: When the write fails; prior value stays intact

        """
        ...

    def load_snapshot_part(self, kind: DataKind) -> SnapshotPart | None:
        """
        Load the last good value for a data kind.

        Returns:
            Stored value, or None on a miss or unreadable data

        """
        ...

    def cached_at(self, kind: DataKind) -> datetime | None:
        """
        When the stored value for a kind was saved.

        Returns:
            Save time, or None on a miss

        """
        ...

    def cached_page(self, kind: DataKind) -> int | None:
        """
        Listing page the stored value was fetched for.

        Returns:
            Page number, or None on a miss or when none was recorded

        """
        ...

    def save_preferences(self, preferences: UserPreferences) -> None:
        """
        Persist user preferences.

        Raises:
            StoreWriteError: When the write fails; prior value stays intact

        """
        ...

    def load_preferences(self) -> UserPreferences | None:
        """
        Load user preferences.

        Returns:
            Stored preferences, or None on first launch or unreadable data

        """
        ...
