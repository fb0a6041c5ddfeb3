"""
User preferences model.

Locally owned state with its own lifecycle: created with defaults on first
launch, changed only by explicit user actions, never fetched from network.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _clean(values: Iterable[str]) -> list[str]:
    """Stripped, non-empty strings from a list-like input."""
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise ValueError("expected a list of strings")
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            raise ValueError("expected a list of strings")
        if value.strip():
            cleaned.append(value.strip())
    return cleaned


class UserPreferences(BaseModel):
    """
    Favorite symbols and watchlist membership.

    Frozen; every mutator returns a new instance so readers never observe a
    half-updated set.
    """

    model_config = ConfigDict(frozen=True)

    favorite_symbols: frozenset[str] = Field(default_factory=frozenset)
    watchlist_ids: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("favorite_symbols", mode="before")
    @classmethod
    def upper_symbols(cls, v: Iterable[str]) -> frozenset[str]:
        return frozenset(s.upper() for s in _clean(v))

    @field_validator("watchlist_ids", mode="before")
    @classmethod
    def lower_ids(cls, v: Iterable[str]) -> frozenset[str]:
        return frozenset(s.lower() for s in _clean(v))

    @field_serializer("favorite_symbols", "watchlist_ids")
    def sorted_list(self, v: frozenset[str]) -> list[str]:
        return sorted(v)

    def is_favorite(self, symbol: str) -> bool:
        return symbol.strip().upper() in self.favorite_symbols

    def with_favorite_toggled(self, symbol: str) -> "UserPreferences":
        """Copy with ``symbol`` added to or removed from the favorites."""
        key = symbol.strip().upper()
        if key in self.favorite_symbols:
            favorites = self.favorite_symbols - {key}
        else:
            favorites = self.favorite_symbols | {key}
        return self.model_copy(update={"favorite_symbols": favorites})

    def with_watchlist_id(self, coin_id: str) -> "UserPreferences":
        ids = self.watchlist_ids | {coin_id.strip().lower()}
        return self.model_copy(update={"watchlist_ids": ids})

    def without_watchlist_id(self, coin_id: str) -> "UserPreferences":
        ids = self.watchlist_ids - {coin_id.strip().lower()}
        return self.model_copy(update={"watchlist_ids": ids})
