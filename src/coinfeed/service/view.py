"""
View derivation.

Pure functions turning a coin list plus a ViewState into the displayed
sequence. Nothing here touches the network, the store or the clock, so the
same inputs always give the same output.
"""

from collections.abc import Callable, Iterable, Sequence

from src.coinfeed.enums import Segment, SortDirection, SortField
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.view import ViewState

SortKey = float | str

_SORT_KEYS: dict[SortField, Callable[[CoinRecord], SortKey | None]] = {
    SortField.MARKET_CAP: lambda c: c.market_cap,
    SortField.PRICE: lambda c: c.price,
    SortField.DAILY_CHANGE: lambda c: c.daily_change_percent,
    SortField.HOURLY_CHANGE: lambda c: c.hourly_change_percent,
    SortField.VOLUME: lambda c: c.volume_24h,
    SortField.NAME: lambda c: c.display_name.casefold(),
    SortField.SYMBOL: lambda c: c.symbol.casefold(),
}


def _in_segment(coin: CoinRecord, segment: Segment) -> bool:
    match segment:
        case Segment.ALL:
            return True
        case Segment.FAVORITES:
            return coin.is_favorite
        case Segment.GAINERS:
            return coin.daily_change_percent > 0
        case Segment.LOSERS:
            return coin.daily_change_percent < 0


def filter_coins(coins: Iterable[CoinRecord], view: ViewState) -> list[CoinRecord]:
    """Apply the segment and search text, keeping input order."""
    return [
        coin
        for coin in coins
        if _in_segment(coin, view.segment) and coin.matches(view.search_text)
    ]


def sort_by_field(
    coins: Iterable[CoinRecord], field: SortField, direction: SortDirection
) -> list[CoinRecord]:
    """
    Stable sort on one column.

    Coins without a value for the column (hourly change is optional) go
    last regardless of direction.
    """
    key = _SORT_KEYS[field]
    present: list[CoinRecord] = []
    missing: list[CoinRecord] = []
    for coin in coins:
        (missing if key(coin) is None else present).append(coin)

    descending = direction is SortDirection.DESCENDING
    present.sort(key=key, reverse=descending)  # type: ignore[arg-type]
    return present + missing


def pin_symbols(
    coins: Sequence[CoinRecord], pinned_symbols: Sequence[str]
) -> list[CoinRecord]:
    """Move coins whose symbol is pinned to the front, in pinned order."""
    rank = {symbol.upper(): i for i, symbol in enumerate(pinned_symbols)}
    pinned = sorted(
        (c for c in coins if c.symbol in rank), key=lambda c: rank[c.symbol]
    )
    rest = [c for c in coins if c.symbol not in rank]
    return pinned + rest


def sort_coins(
    coins: Iterable[CoinRecord],
    view: ViewState,
    pinned_symbols: Sequence[str] = (),
) -> list[CoinRecord]:
    """
    Order coins for display.

    Under the default ordering (market cap descending, no search, all
    segments) pinned symbols lead; any other view sorts by comparator only.
    """
    ordered = sort_by_field(coins, view.sort_field, view.sort_direction)
    if view.is_default_ordering and pinned_symbols:
        return pin_symbols(ordered, pinned_symbols)
    return ordered


def derive_view(
    coins: Iterable[CoinRecord],
    view: ViewState,
    pinned_symbols: Sequence[str] = (),
) -> tuple[CoinRecord, ...]:
    """The displayed coin sequence for a snapshot's coins and a view."""
    return tuple(sort_coins(filter_coins(coins, view), view, pinned_symbols))


def apply_favorites(
    coins: Iterable[CoinRecord], preferences: UserPreferences
) -> list[CoinRecord]:
    """Set each coin's favorite flag from the preferences, matched by symbol."""
    return [coin.with_favorite(preferences.is_favorite(coin.symbol)) for coin in coins]


def top_movers(
    coins: Iterable[CoinRecord], count: int, *, gainers: bool = True
) -> list[CoinRecord]:
    """Coins with the largest 24h move up (or down), strongest first."""
    direction = SortDirection.DESCENDING if gainers else SortDirection.ASCENDING
    return sort_by_field(coins, SortField.DAILY_CHANGE, direction)[:count]


def watchlist_coins(
    coins: Iterable[CoinRecord], preferences: UserPreferences
) -> list[CoinRecord]:
    """Watchlisted coins, in listing order."""
    return [coin for coin in coins if coin.id in preferences.watchlist_ids]
