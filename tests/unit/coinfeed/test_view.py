"""
Tests for view derivation.

Filtering, sorting, pinning and the home-screen helpers are pure functions
of their inputs.
"""

from src.coinfeed.enums import Segment, SortDirection, SortField
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.view import ViewState
from src.coinfeed.service.view import (
    apply_favorites,
    derive_view,
    filter_coins,
    pin_symbols,
    sort_by_field,
    sort_coins,
    top_movers,
    watchlist_coins,
)
from tests.unit.coinfeed.helpers import CoinBuilder, coin, symbols

PINNED = ("BTC", "ETH", "BNB", "SOL", "XRP")


class TestPinnedOrdering:
    """Test pinned symbols under the default ordering."""

    def test_pinned_symbol_leads_regardless_of_cap(self) -> None:
        # Given: BTC with a smaller cap than two unpinned coins
        coins = [coin("SHIB", cap=1e9), coin("BTC", cap=1e6), coin("DOGE", cap=2e9)]

        # When: Deriving the default view
        visible = derive_view(coins, ViewState(), PINNED)

        # Then: BTC first, the rest by market cap descending
        assert symbols(visible) == ["BTC", "DOGE", "SHIB"]

    def test_pinned_symbols_follow_declared_order(self) -> None:
        coins = [
            coin("XRP", cap=5e10),
            coin("DOGE", cap=9e12),
            coin("ETH", cap=4e11),
            coin("BTC", cap=1e12),
        ]

        visible = derive_view(coins, ViewState(), PINNED)

        assert symbols(visible) == ["BTC", "ETH", "XRP", "DOGE"]

    def test_no_pinning_when_sort_is_not_default(self) -> None:
        coins = [coin("SHIB", cap=1e9), coin("BTC", cap=1e6), coin("DOGE", cap=2e9)]
        view = ViewState().toggled(SortField.MARKET_CAP)

        visible = derive_view(coins, view, PINNED)

        assert symbols(visible) == ["BTC", "SHIB", "DOGE"]

    def test_no_pinning_while_searching(self) -> None:
        coins = [
            CoinBuilder("BTC").with_name("Bitcoin").with_cap(1e6).build(),
            CoinBuilder("BCH").with_name("Bitcoin Cash").with_cap(1e9).build(),
        ]

        visible = derive_view(coins, ViewState().with_search_text("bitcoin"), PINNED)

        assert symbols(visible) == ["BCH", "BTC"]

    def test_pin_symbols_keeps_relative_order_of_rest(self) -> None:
        coins = [coin("A"), coin("ETH"), coin("B"), coin("BTC")]

        assert symbols(pin_symbols(coins, ["btc", "eth"])) == ["BTC", "ETH", "A", "B"]


class TestSorting:
    """Test comparator sorting."""

    def test_toggling_same_field_twice_restores_order(self) -> None:
        # Given: A default-ordered view
        coins = [coin("SHIB", cap=1e9), coin("BTC", cap=1e12), coin("DOGE", cap=2e9)]
        view = ViewState()
        original = derive_view(coins, view, PINNED)

        # When: Toggling market cap twice
        reversed_view = view.toggled(SortField.MARKET_CAP)
        restored_view = reversed_view.toggled(SortField.MARKET_CAP)

        # Then: Direction flips twice and the order comes back
        assert reversed_view.sort_direction is SortDirection.ASCENDING
        assert restored_view.sort_direction is SortDirection.DESCENDING
        assert derive_view(coins, restored_view, PINNED) == original

    def test_name_sort_is_case_insensitive(self) -> None:
        coins = [
            CoinBuilder("B").with_name("beta").build(),
            CoinBuilder("A").with_name("Alpha").build(),
            CoinBuilder("C").with_name("charlie").build(),
        ]

        ordered = sort_by_field(coins, SortField.NAME, SortDirection.ASCENDING)

        assert [c.display_name for c in ordered] == ["Alpha", "beta", "charlie"]

    def test_missing_hourly_change_sorts_last_both_ways(self) -> None:
        coins = [
            CoinBuilder("A").with_hourly(None).build(),
            CoinBuilder("B").with_hourly(1.0).build(),
            CoinBuilder("C").with_hourly(-2.0).build(),
        ]

        desc = sort_by_field(coins, SortField.HOURLY_CHANGE, SortDirection.DESCENDING)
        asc = sort_by_field(coins, SortField.HOURLY_CHANGE, SortDirection.ASCENDING)

        assert symbols(desc) == ["B", "C", "A"]
        assert symbols(asc) == ["C", "B", "A"]

    def test_sort_is_stable_for_ties(self) -> None:
        coins = [coin("A", cap=5.0), coin("B", cap=5.0), coin("C", cap=9.0)]

        view = ViewState().toggled(SortField.PRICE)
        ordered = sort_coins(coins, view)

        assert symbols(ordered) == ["A", "B", "C"]


class TestFiltering:
    """Test segment and search filters."""

    def test_segments(self) -> None:
        coins = [
            coin("UP", change=3.0),
            coin("DOWN", change=-2.0),
            coin("FLAT", change=0.0),
            CoinBuilder("FAV").with_change(-1.0).favorite().build(),
        ]

        def visible(segment: Segment) -> list[str]:
            return symbols(filter_coins(coins, ViewState().with_segment(segment)))

        assert visible(Segment.ALL) == ["UP", "DOWN", "FLAT", "FAV"]
        assert visible(Segment.GAINERS) == ["UP"]
        assert visible(Segment.LOSERS) == ["DOWN", "FAV"]
        assert visible(Segment.FAVORITES) == ["FAV"]

    def test_search_matches_symbol_or_name(self) -> None:
        coins = [
            CoinBuilder("BTC").with_name("Bitcoin").build(),
            CoinBuilder("ETH").with_name("Ethereum").build(),
        ]

        assert symbols(filter_coins(coins, ViewState().with_search_text("ETHER"))) == [
            "ETH"
        ]
        assert symbols(filter_coins(coins, ViewState().with_search_text("zzz"))) == []

    def test_empty_result_is_not_an_error(self) -> None:
        view = ViewState().with_segment(Segment.FAVORITES)

        assert derive_view([coin("BTC")], view, PINNED) == ()


class TestHelpers:
    """Test favorites merge and home-screen helpers."""

    def test_apply_favorites_by_symbol(self) -> None:
        prefs = UserPreferences(favorite_symbols=["eth"])

        merged = apply_favorites([coin("BTC"), coin("ETH")], prefs)

        assert [c.is_favorite for c in merged] == [False, True]

    def test_apply_favorites_clears_stale_flags(self) -> None:
        flagged = CoinBuilder("BTC").favorite().build()

        merged = apply_favorites([flagged], UserPreferences())

        assert not merged[0].is_favorite

    def test_top_movers(self) -> None:
        coins = [coin("A", change=1.0), coin("B", change=9.0), coin("C", change=-4.0)]

        assert symbols(top_movers(coins, 2)) == ["B", "A"]
        assert symbols(top_movers(coins, 2, gainers=False)) == ["C", "A"]

    def test_watchlist_coins_in_listing_order(self) -> None:
        prefs = UserPreferences(watchlist_ids=["sol", "btc"])

        picked = watchlist_coins([coin("BTC"), coin("ETH"), coin("SOL")], prefs)

        assert symbols(picked) == ["BTC", "SOL"]
