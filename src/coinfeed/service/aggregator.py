"""
Market data aggregator.

The single owner of published market state. For each data kind it runs
the refresh chain

    primary provider -> fallback provider -> local cache -> failed

merges locally owned user state into the result, derives the visible coin
sequence and publishes a new immutable MarketBoard to subscribers.

Concurrency model: one asyncio event loop. At most one refresh task runs
per kind; concurrent callers await the running task instead of starting
another. Each refresh carries a generation number and results from a
superseded generation are dropped.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from src.coinfeed.enums import DataKind, DataSource, RefreshState, Segment, SortField
from src.coinfeed.errors import ProviderError, StoreWriteError
from src.coinfeed.model.board import MarketBoard
from src.coinfeed.model.coin import CoinRecord, dedupe_coins
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.query import CoinQuery
from src.coinfeed.model.snapshot import MarketSnapshot
from src.coinfeed.model.view import ViewState
from src.coinfeed.protocols.market import (
    MarketDataProvider,
    SnapshotPart,
    SnapshotStore,
)
from src.coinfeed.service.view import (
    apply_favorites,
    derive_view,
    top_movers,
    watchlist_coins,
)

logger = logging.getLogger(__name__)

BoardCallback = Callable[[MarketBoard], None]

# Generic snapshot field -> per-kind field name
_FIELDS: dict[DataKind, dict[str, str]] = {
    DataKind.COINS: {
        "data": "coins",
        "source": "coin_source",
        "updated_at": "coins_updated_at",
        "error": "coin_error",
        "warning": "coin_warning",
        "state": "coin_state",
    },
    DataKind.GLOBAL: {
        "data": "global_summary",
        "source": "global_source",
        "updated_at": "global_updated_at",
        "error": "global_error",
        "warning": "global_warning",
        "state": "global_state",
    },
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MarketAggregator:
    """
    Refresh state machine and view owner.

    All inbound operations other than the refresh family are synchronous:
    they update view state or preferences and republish immediately.
    """

    def __init__(
        self,
        primary: MarketDataProvider,
        fallback: MarketDataProvider | None,
        store: SnapshotStore,
        *,
        query: CoinQuery | None = None,
        pinned_symbols: Sequence[str] = (),
        default_preferences: UserPreferences | None = None,
        top_movers_count: int = 3,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            primary: Provider tried first on every refresh
            fallback: Provider tried when the primary fails, if any
            store: Last-known-good cache and preference storage
            query: Coin listing page to fetch
            pinned_symbols: Symbols leading the default ordering, in order
            default_preferences: Preferences used when none are stored yet
            top_movers_count: Default size of the gainers/losers lists

        """
        self.primary = primary
        self.fallback = fallback
        self.store = store
        self.pinned_symbols = tuple(s.upper() for s in pinned_symbols)
        self.top_movers_count = top_movers_count

        self._query = query or CoinQuery()
        self._view = ViewState()
        self._preferences = (
            store.load_preferences() or default_preferences or UserPreferences()
        )
        self._snapshot = MarketSnapshot()
        self._board = self._build_board(self._snapshot)

        self._subscribers: list[BoardCallback] = []
        self._in_flight: dict[DataKind, asyncio.Task[MarketSnapshot]] = {}
        self._generation: dict[DataKind, int] = {kind: 0 for kind in DataKind}
        # State each kind returns to if its refresh is cancelled
        self._settled: dict[DataKind, RefreshState] = {
            kind: RefreshState.IDLE for kind in DataKind
        }

    # ------------------------------------------------------------------
    # Outbound state
    # ------------------------------------------------------------------

    @property
    def board(self) -> MarketBoard:
        return self._board

    @property
    def snapshot(self) -> MarketSnapshot:
        return self._snapshot

    @property
    def visible_coins(self) -> tuple[CoinRecord, ...]:
        return self._board.coins

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    @property
    def query(self) -> CoinQuery:
        return self._query

    def generation(self, kind: DataKind) -> int:
        """Number of refreshes started for ``kind``."""
        return self._generation[kind]

    def is_refreshing(self, kind: DataKind) -> bool:
        task = self._in_flight.get(kind)
        return task is not None and not task.done()

    def subscribe(self, callback: BoardCallback) -> Callable[[], None]:
        """
        Register a callback for every published board.

        The callback is invoked immediately with the current board.

        Returns:
            Function that removes the subscription

        """
        self._subscribers.append(callback)
        self._notify(callback, self._board)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, callback: BoardCallback, board: MarketBoard) -> None:
        try:
            callback(board)
        except Exception:
            logger.exception("Subscriber raised while handling market board")

    def _build_board(self, snapshot: MarketSnapshot) -> MarketBoard:
        return MarketBoard(
            snapshot=snapshot,
            view=self._view,
            preferences=self._preferences,
            coins=derive_view(snapshot.coins, self._view, self.pinned_symbols),
        )

    def _publish(self, snapshot: MarketSnapshot | None = None) -> MarketBoard:
        """Merge favorites, derive the view and notify subscribers."""
        base = snapshot if snapshot is not None else self._snapshot
        merged = base.with_coins(apply_favorites(base.coins, self._preferences))
        self._snapshot = merged
        self._board = self._build_board(merged)
        for callback in list(self._subscribers):
            self._notify(callback, self._board)
        return self._board

    def _update(self, kind: DataKind, **fields: Any) -> MarketSnapshot:
        names = _FIELDS[kind]
        return self._snapshot.model_copy(
            update={names[key]: value for key, value in fields.items()}
        )

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, kind: DataKind, *, force: bool = False) -> MarketSnapshot:
        """
        Refresh one data kind.

        A call made while a refresh of the same kind is running joins it.
        With ``force`` the running refresh is cancelled and replaced, and
        anything it would have produced is discarded.

        Returns:
            Snapshot after the refresh settled

        """
        running = self._in_flight.get(kind)
        if running is not None and not running.done():
            if not force:
                logger.debug(f"Joining in-flight {kind.value} refresh")
                return await self._wait_for(kind, running)
            logger.info(f"Superseding in-flight {kind.value} refresh")
            running.cancel()

        current = self._snapshot.state_for(kind)
        if current is not RefreshState.REFRESHING:
            self._settled[kind] = current
        self._generation[kind] += 1
        generation = self._generation[kind]
        self._publish(self._update(kind, state=RefreshState.REFRESHING))

        task = asyncio.create_task(
            self._guarded_refresh(kind, generation),
            name=f"refresh-{kind.value}-{generation}",
        )
        self._in_flight[kind] = task
        task.add_done_callback(lambda t: self._on_done(kind, generation, t))
        return await self._wait_for(kind, task)

    async def refresh_coins(self, *, force: bool = False) -> MarketSnapshot:
        return await self.refresh(DataKind.COINS, force=force)

    async def refresh_global(self, *, force: bool = False) -> MarketSnapshot:
        return await self.refresh(DataKind.GLOBAL, force=force)

    async def refresh_all(self, *, force: bool = False) -> MarketSnapshot:
        """Refresh both kinds concurrently."""
        await asyncio.gather(
            self.refresh(DataKind.COINS, force=force),
            self.refresh(DataKind.GLOBAL, force=force),
        )
        return self._snapshot

    async def set_query(self, query: CoinQuery) -> MarketSnapshot:
        """Switch the listing query and refetch coins immediately."""
        self._query = query
        return await self.refresh(DataKind.COINS, force=True)

    async def load_page(self, page: int) -> MarketSnapshot:
        return await self.set_query(self._query.for_page(page))

    async def cancel_pending(self) -> None:
        """Cancel running refreshes and wait for them to finish."""
        tasks = [task for task in self._in_flight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _on_done(
        self, kind: DataKind, generation: int, task: asyncio.Task[MarketSnapshot]
    ) -> None:
        if self._in_flight.get(kind) is task:
            del self._in_flight[kind]
        # Superseded tasks are stale; their successor owns the state
        if task.cancelled() and not self._is_stale(kind, generation):
            settled = self._settled[kind]
            logger.info(f"{kind.value} refresh cancelled; back to {settled.value}")
            self._publish(self._update(kind, state=settled))

    async def _wait_for(
        self, kind: DataKind, task: asyncio.Task[MarketSnapshot]
    ) -> MarketSnapshot:
        """
        Await a refresh task without letting this caller cancel it.

        If the task was cancelled because a forced refresh replaced it, wait
        for the replacement instead.
        """
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            successor = self._in_flight.get(kind)
            if successor is not None and successor is not task:
                return await self._wait_for(kind, successor)
            return self._snapshot

    def _is_stale(self, kind: DataKind, generation: int) -> bool:
        return generation != self._generation[kind]

    async def _fetch(
        self, provider: MarketDataProvider, kind: DataKind
    ) -> SnapshotPart:
        if kind is DataKind.COINS:
            return dedupe_coins(await provider.fetch_coins(self._query))
        return await provider.fetch_global()

    async def _guarded_refresh(
        self, kind: DataKind, generation: int
    ) -> MarketSnapshot:
        """Run a refresh; an unexpected error marks the kind failed, then propagates."""
        try:
            return await self._run_refresh(kind, generation)
        except Exception as e:
            logger.exception(f"Unexpected error refreshing {kind.value}")
            if not self._is_stale(kind, generation):
                self._publish(
                    self._update(
                        kind, error=str(e), warning=None, state=RefreshState.FAILED
                    )
                )
            raise

    async def _run_refresh(self, kind: DataKind, generation: int) -> MarketSnapshot:
        providers: list[tuple[MarketDataProvider, DataSource]] = [
            (self.primary, DataSource.PRIMARY)
        ]
        if self.fallback is not None:
            providers.append((self.fallback, DataSource.FALLBACK))

        errors: list[ProviderError] = []
        for provider, source in providers:
            try:
                value = await self._fetch(provider, kind)
            except ProviderError as e:
                logger.warning(f"{kind.value} refresh via {provider.name} failed: {e}")
                errors.append(e)
                continue

            if self._is_stale(kind, generation):
                logger.debug(f"Dropping stale {kind.value} result (gen {generation})")
                return self._snapshot
            self._persist(kind, value)
            logger.info(f"{kind.value} refreshed from {provider.name} ({source.value})")
            self._publish(
                self._update(
                    kind,
                    data=tuple(value) if kind is DataKind.COINS else value,
                    source=source,
                    updated_at=_utcnow(),
                    error=None,
                    warning=None,
                    state=RefreshState.SUCCEEDED,
                )
            )
            return self._snapshot

        if self._is_stale(kind, generation):
            logger.debug(f"Dropping stale {kind.value} failure (gen {generation})")
            return self._snapshot
        self._settle_from_cache(kind, errors)
        return self._snapshot

    def _persist(self, kind: DataKind, value: SnapshotPart) -> None:
        page = self._query.page if kind is DataKind.COINS else None
        try:
            self.store.save_snapshot_part(kind, value, page=page)
        except StoreWriteError as e:
            logger.error(f"Could not cache {kind.value}: {e}")

    def _settle_from_cache(self, kind: DataKind, errors: list[ProviderError]) -> None:
        """Serve last-known-good data, or mark the kind failed."""
        reason = "; ".join(str(e) for e in errors) or "no provider answered"
        cached = self.store.load_snapshot_part(kind)

        if cached is None:
            logger.warning(f"{kind.value} refresh failed with no cached data: {reason}")
            self._publish(
                self._update(
                    kind,
                    error=f"Unable to load {kind.value}: {reason}",
                    warning=None,
                    state=RefreshState.FAILED,
                )
            )
            return

        saved_at = self.store.cached_at(kind) or _utcnow()
        logger.info(f"Serving cached {kind.value} saved at {saved_at.isoformat()}")
        warning = f"Showing cached {kind.value} from {saved_at:%Y-%m-%d %H:%M} UTC"
        if kind is DataKind.COINS:
            cached_page = self.store.cached_page(kind)
            if cached_page is not None and cached_page != self._query.page:
                logger.warning(
                    f"Cached coins are page {cached_page}, "
                    f"requested page {self._query.page}"
                )
                warning = (
                    f"Showing cached coins (page {cached_page}, not page "
                    f"{self._query.page}) from {saved_at:%Y-%m-%d %H:%M} UTC"
                )
        self._publish(
            self._update(
                kind,
                data=tuple(cached) if kind is DataKind.COINS else cached,
                source=DataSource.CACHE,
                updated_at=saved_at,
                error=None,
                warning=warning,
                state=RefreshState.SUCCEEDED,
            )
        )

    def restore_cached(self) -> bool:
        """
        Publish cached data for kinds that have nothing yet.

        Called at launch so a board is available before the first network
        round-trip. Refresh state is left untouched.

        Returns:
            True if anything was restored

        """
        restored = False
        snapshot = self._snapshot
        for kind in DataKind:
            if snapshot.source_for(kind) is not None:
                continue
            cached = self.store.load_snapshot_part(kind)
            if cached is None:
                continue
            self._snapshot = self._update(
                kind,
                data=tuple(cached) if kind is DataKind.COINS else cached,
                source=DataSource.CACHE,
                updated_at=self.store.cached_at(kind),
            )
            snapshot = self._snapshot
            restored = True
            logger.info(f"Restored cached {kind.value}")

        if restored:
            self._publish()
        return restored

    # ------------------------------------------------------------------
    # Inbound synchronous operations
    # ------------------------------------------------------------------

    def _set_preferences(self, preferences: UserPreferences) -> None:
        self._preferences = preferences
        try:
            self.store.save_preferences(preferences)
        except StoreWriteError as e:
            logger.error(f"Could not save preferences: {e}")
        self._publish()

    def toggle_favorite(self, coin_id: str) -> bool:
        """
        Flip the favorite flag of a coin.

        Returns:
            Whether the coin is a favorite afterwards

        """
        coin = self._snapshot.coin(coin_id)
        symbol = coin.symbol if coin else coin_id.strip().upper()
        self._set_preferences(self._preferences.with_favorite_toggled(symbol))
        return self._preferences.is_favorite(symbol)

    def add_to_watchlist(self, coin_id: str) -> None:
        self._set_preferences(self._preferences.with_watchlist_id(coin_id))

    def remove_from_watchlist(self, coin_id: str) -> None:
        self._set_preferences(self._preferences.without_watchlist_id(coin_id))

    def set_search_text(self, text: str) -> None:
        self._view = self._view.with_search_text(text)
        self._publish()

    def set_segment(self, segment: Segment) -> None:
        self._view = self._view.with_segment(segment)
        self._publish()

    def toggle_sort(self, field: SortField) -> None:
        self._view = self._view.toggled(field)
        self._publish()

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def watchlist_coins(self) -> list[CoinRecord]:
        return watchlist_coins(self._snapshot.coins, self._preferences)

    def top_gainers(self, count: int | None = None) -> list[CoinRecord]:
        return top_movers(
            self._snapshot.coins, count or self.top_movers_count, gainers=True
        )

    def top_losers(self, count: int | None = None) -> list[CoinRecord]:
        return top_movers(
            self._snapshot.coins, count or self.top_movers_count, gainers=False
        )
