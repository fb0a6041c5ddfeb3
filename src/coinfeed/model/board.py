"""
Market board - what subscribers receive on every state transition.

Bundles the current snapshot with the view settings and the derived
visible coin sequence so a renderer needs nothing else.
"""

from pydantic import BaseModel, ConfigDict

from src.coinfeed.enums import DataKind
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.snapshot import MarketSnapshot
from src.coinfeed.model.view import ViewState


class MarketBoard(BaseModel):
    """Snapshot plus derived, filtered and sorted coins."""

    snapshot: MarketSnapshot
    view: ViewState
    preferences: UserPreferences
    coins: tuple[CoinRecord, ...] = ()

    model_config = ConfigDict(frozen=True)

    def is_loading(self, kind: DataKind) -> bool:
        return self.snapshot.is_loading(kind)

    def error_for(self, kind: DataKind) -> str | None:
        return self.snapshot.error_for(kind)

    def warning_for(self, kind: DataKind) -> str | None:
        return self.snapshot.warning_for(kind)

    @property
    def is_empty(self) -> bool:
        """True when the current filters match nothing."""
        return not self.coins
