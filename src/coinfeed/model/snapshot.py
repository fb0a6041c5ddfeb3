"""
Market snapshot model - the aggregator's published state.

This model represents a point-in-time view of everything the aggregator
knows. It is immutable (frozen): every refresh transition builds a new
snapshot that atomically replaces the previous one, so a reader never sees
a half-updated state.
"""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from src.coinfeed.enums import DataKind, DataSource, RefreshState
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary


class MarketSnapshot(BaseModel):
    """
    Coins and global summary with per-kind provenance.

    Errors are fatal for the kind (no provider and no cache answered);
    warnings are non-fatal (data is being served from cache).
    """

    coins: tuple[CoinRecord, ...] = ()
    global_summary: GlobalSummary | None = None

    coin_source: DataSource | None = None
    global_source: DataSource | None = None

    coins_updated_at: datetime | None = None
    global_updated_at: datetime | None = None

    coin_error: str | None = None
    global_error: str | None = None
    coin_warning: str | None = None
    global_warning: str | None = None

    coin_state: RefreshState = RefreshState.IDLE
    global_state: RefreshState = RefreshState.IDLE

    model_config = ConfigDict(frozen=True)

    def coin(self, coin_id: str) -> CoinRecord | None:
        """Look up a coin by id."""
        key = coin_id.strip().lower()
        for coin in self.coins:
            if coin.id == key:
                return coin
        return None

    def state_for(self, kind: DataKind) -> RefreshState:
        return self.coin_state if kind is DataKind.COINS else self.global_state

    def source_for(self, kind: DataKind) -> DataSource | None:
        return self.coin_source if kind is DataKind.COINS else self.global_source

    def error_for(self, kind: DataKind) -> str | None:
        return self.coin_error if kind is DataKind.COINS else self.global_error

    def warning_for(self, kind: DataKind) -> str | None:
        return self.coin_warning if kind is DataKind.COINS else self.global_warning

    def is_loading(self, kind: DataKind) -> bool:
        return self.state_for(kind) is RefreshState.REFRESHING

    def with_coins(self, coins: Sequence[CoinRecord]) -> "MarketSnapshot":
        """Copy with the coin list replaced, everything else kept."""
        return self.model_copy(update={"coins": tuple(coins)})

    def to_summary(self) -> str:
        """Generate a human-readable summary."""
        parts = [f"coins={len(self.coins)}"]
        if self.coin_source:
            parts.append(f"coin_source={self.coin_source.value}")
        parts.append(f"coin_state={self.coin_state.value}")
        if self.global_source:
            parts.append(f"global_source={self.global_source.value}")
        parts.append(f"global_state={self.global_state.value}")
        if self.coin_error or self.global_error:
            parts.append("errors")
        elif self.coin_warning or self.global_warning:
            parts.append("stale")
        return " ".join(parts)
