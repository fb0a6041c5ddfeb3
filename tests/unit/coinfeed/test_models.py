"""
Tests for domain primitives and market data models.

Covers normalization, immutability, formatting and the small derived
helpers the aggregator relies on.
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from src.coinfeed.domain.primitives import Percentage, Price, UsdAmount
from src.coinfeed.enums import (
    DataKind,
    DataSource,
    RefreshState,
    Segment,
    SortDirection,
    SortField,
)
from src.coinfeed.model.coin import CoinRecord, coin_identity, dedupe_coins
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.insights import (
    FearGreedHistory,
    FearGreedReading,
    PricePoint,
    price_change_percent,
)
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.query import CoinQuery
from src.coinfeed.model.snapshot import MarketSnapshot
from src.coinfeed.model.view import ViewState
from tests.unit.coinfeed.helpers import CoinBuilder, coin


class TestPrimitives:
    """Test display primitives."""

    def test_usd_amount_abbreviations(self) -> None:
        assert UsdAmount(value=2.41e12).format_abbreviated() == "$2.41T"
        assert UsdAmount(value=86.5e9).format_abbreviated() == "$86.50B"
        assert UsdAmount(value=1_500_000).format_abbreviated() == "$1.50M"
        assert UsdAmount(value=999).format_abbreviated() == "$999.00"

    def test_usd_amount_rejects_negative(self) -> None:
        with pytest.raises(ValidationError):
            UsdAmount(value=-1.0)

    def test_price_decimals_depend_on_asset(self) -> None:
        assert Price(value=64250.123, symbol="BTC").format_display() == "$64,250.12"
        assert Price(value=0.123456, symbol="DOGE").format_display() == "$0.1235"

    def test_percentage_fraction_round_trip(self) -> None:
        pct = Percentage.from_fraction(0.532)
        assert pct.value == pytest.approx(53.2)
        assert pct.as_fraction() == pytest.approx(0.532)

    def test_percentage_signed_format(self) -> None:
        assert Percentage(value=2.454).format_signed() == "+2.45%"
        assert Percentage(value=-1.1).format_signed() == "-1.10%"
        assert Percentage(value=0.0).format_signed() == "+0.00%"


class TestCoinRecord:
    """Test CoinRecord normalization and helpers."""

    def test_identity_is_lowercased_symbol(self) -> None:
        assert coin_identity("  BTC ") == "btc"
        assert CoinRecord.identity_for("Eth") == "eth"

    def test_symbol_and_id_are_normalized(self) -> None:
        record = CoinRecord(
            id="SOL",
            symbol="sol",
            display_name="Solana",
            price=145.3,
            daily_change_percent=5.8,
            volume_24h=1.0,
            market_cap=2.0,
        )

        assert record.id == "sol"
        assert record.symbol == "SOL"
        assert record.hourly_change_percent is None
        assert record.is_favorite is False

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CoinBuilder("BTC").with_price(-1.0).build()

    def test_record_is_frozen(self) -> None:
        record = coin("BTC")
        with pytest.raises(ValidationError):
            record.price = 1.0  # type: ignore[misc]

    def test_with_favorite_returns_same_instance_when_unchanged(self) -> None:
        record = coin("BTC")

        assert record.with_favorite(False) is record
        flagged = record.with_favorite(True)
        assert flagged.is_favorite
        assert not record.is_favorite

    def test_matches_symbol_or_name_case_insensitively(self) -> None:
        record = CoinBuilder("BTC").with_name("Bitcoin").build()

        assert record.matches("btc")
        assert record.matches("COIN")
        assert record.matches("  ")
        assert not record.matches("eth")

    def test_dedupe_keeps_first_occurrence(self) -> None:
        big = CoinBuilder("UNI").with_name("Uniswap").with_cap(5e9).build()
        small = CoinBuilder("UNI").with_name("Unicorn").with_cap(1e6).build()

        unique = dedupe_coins([big, coin("ETH"), small])

        assert [c.display_name for c in unique] == ["Uniswap", "Eth"]

    def test_format_summary_marks_favorites(self) -> None:
        record = (
            CoinBuilder("BTC").with_price(64250.0).with_change(2.5).favorite().build()
        )

        summary = record.format_summary()

        assert summary.startswith("*BTC")
        assert "$64,250.00" in summary
        assert "+2.50%" in summary


class TestGlobalSummary:
    """Test global summary dominance handling."""

    def test_dominance_keys_are_case_insensitive(self) -> None:
        summary = GlobalSummary(
            total_market_cap_usd=1.0,
            total_volume_usd=1.0,
            market_cap_percent_by_asset={"BTC": 53.2},
        )

        assert summary.dominance("btc") == 53.2
        assert summary.dominance("BTC") == 53.2
        assert summary.dominance_fraction("btc") == pytest.approx(0.532)

    def test_missing_dominance_is_absent_not_zero(self) -> None:
        summary = GlobalSummary(total_market_cap_usd=1.0, total_volume_usd=1.0)

        assert summary.dominance("eth") is None
        assert summary.dominance_fraction("eth") is None
        assert "ETH Dominance --" in summary.format_summary()


class TestUserPreferences:
    """Test preference normalization and immutable mutators."""

    def test_inputs_are_normalized(self) -> None:
        prefs = UserPreferences(
            favorite_symbols=["btc", " eth ", ""], watchlist_ids=["SOL"]
        )

        assert prefs.favorite_symbols == frozenset({"BTC", "ETH"})
        assert prefs.watchlist_ids == frozenset({"sol"})

    def test_toggle_twice_restores_original(self) -> None:
        prefs = UserPreferences()

        once = prefs.with_favorite_toggled("btc")
        twice = once.with_favorite_toggled("BTC")

        assert once.is_favorite("btc")
        assert twice == prefs

    def test_watchlist_add_and_remove(self) -> None:
        prefs = UserPreferences().with_watchlist_id("BTC").with_watchlist_id("eth")

        assert prefs.watchlist_ids == frozenset({"btc", "eth"})
        assert prefs.without_watchlist_id("btc").watchlist_ids == frozenset({"eth"})

    def test_serializes_as_sorted_lists(self) -> None:
        prefs = UserPreferences(favorite_symbols=["sol", "btc"])

        assert prefs.model_dump(mode="json")["favorite_symbols"] == ["BTC", "SOL"]

    def test_string_instead_of_list_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UserPreferences.model_validate({"favorite_symbols": "BTC"})


class TestViewAndQuery:
    """Test view state transitions and query paging."""

    def test_default_view_is_default_ordering(self) -> None:
        assert ViewState().is_default_ordering

    def test_search_or_segment_leaves_default_ordering(self) -> None:
        assert not ViewState().with_search_text("bt").is_default_ordering
        assert not ViewState().with_segment(Segment.GAINERS).is_default_ordering

    def test_toggle_same_field_reverses(self) -> None:
        view = ViewState().toggled(SortField.MARKET_CAP)

        assert view.sort_direction is SortDirection.ASCENDING
        assert view.toggled(SortField.MARKET_CAP) == ViewState()

    def test_new_field_uses_natural_direction(self) -> None:
        by_name = ViewState().toggled(SortField.NAME)
        by_price = by_name.toggled(SortField.PRICE)

        assert by_name.sort_direction is SortDirection.ASCENDING
        assert by_price.sort_direction is SortDirection.DESCENDING

    def test_query_paging(self) -> None:
        query = CoinQuery(per_page=50)

        assert query.offset == 0
        assert query.for_page(3).offset == 100
        with pytest.raises(ValidationError):
            query.for_page(0)


class TestMarketSnapshot:
    """Test snapshot accessors."""

    def test_per_kind_accessors(self) -> None:
        snapshot = MarketSnapshot(
            coins=(coin("BTC"),),
            coin_source=DataSource.CACHE,
            coin_warning="stale",
            coin_state=RefreshState.SUCCEEDED,
            global_error="boom",
            global_state=RefreshState.FAILED,
        )

        assert snapshot.source_for(DataKind.COINS) is DataSource.CACHE
        assert snapshot.warning_for(DataKind.COINS) == "stale"
        assert snapshot.error_for(DataKind.GLOBAL) == "boom"
        assert snapshot.state_for(DataKind.GLOBAL) is RefreshState.FAILED
        assert snapshot.coin("BTC") is snapshot.coins[0]
        assert snapshot.coin("eth") is None
        assert "errors" in snapshot.to_summary()

    def test_initial_snapshot_is_idle(self) -> None:
        snapshot = MarketSnapshot()

        assert snapshot.coin_state is RefreshState.IDLE
        assert not snapshot.is_loading(DataKind.COINS)
        assert snapshot.global_summary is None


class TestInsightModels:
    """Test fear & greed offsets and price change helper."""

    def _readings(self, count: int) -> FearGreedHistory:
        start = datetime(2024, 6, 10, tzinfo=UTC)
        return FearGreedHistory(
            readings=tuple(
                FearGreedReading(
                    value=50 + i % 10,
                    classification="Neutral",
                    timestamp=start - timedelta(days=i),
                )
                for i in range(count)
            )
        )

    def test_offsets_follow_newest_first_order(self) -> None:
        history = self._readings(30)

        assert history.current is history.readings[0]
        assert history.yesterday is history.readings[1]
        assert history.last_week is history.readings[6]
        assert history.last_month is history.readings[29]

    def test_short_history_reports_missing_offsets(self) -> None:
        history = self._readings(3)

        assert history.yesterday is not None
        assert history.last_week is None
        assert history.last_month is None

    def test_price_change_percent(self) -> None:
        now = datetime.now(UTC)
        points = [
            PricePoint(timestamp=now, price=100.0),
            PricePoint(timestamp=now, price=110.0),
        ]

        assert price_change_percent(points) == pytest.approx(10.0)
        assert price_change_percent(points[:1]) is None
