"""
Periodic refresh scheduler.

One asyncio task per data kind. Each task refreshes immediately on start,
then sleeps its interval on an event so that stopping or a manual refresh
wakes it without waiting out the timer.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.coinfeed.config import SchedulerConfig
from src.coinfeed.enums import DataKind, RefreshState
from src.coinfeed.model.snapshot import MarketSnapshot
from src.coinfeed.service.aggregator import MarketAggregator

logger = logging.getLogger(__name__)


@dataclass
class JobStats:
    """Per-kind health counters reported by ``RefreshScheduler.info``."""

    interval_seconds: float
    last_run: datetime | None = None
    last_success: datetime | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    runs: int = 0


class RefreshScheduler:
    """Drives ``MarketAggregator.refresh`` on a fixed cadence per kind."""

    def __init__(
        self,
        aggregator: MarketAggregator,
        coins_interval: float = 30.0,
        global_interval: float = 120.0,
    ) -> None:
        if coins_interval <= 0 or global_interval <= 0:
            raise ValueError("Refresh intervals must be positive")

        self.aggregator = aggregator
        self.intervals = {
            DataKind.COINS: coins_interval,
            DataKind.GLOBAL: global_interval,
        }

        self._stop_event: asyncio.Event | None = None
        self._wakeups: dict[DataKind, asyncio.Event] = {}
        self._next_tick: dict[DataKind, float] = {}
        self._tasks: dict[DataKind, asyncio.Task[None]] = {}
        self.job_stats = {
            kind: JobStats(interval_seconds=interval)
            for kind, interval in self.intervals.items()
        }

    @classmethod
    def from_config(
        cls, aggregator: MarketAggregator, config: SchedulerConfig
    ) -> "RefreshScheduler":
        return cls(
            aggregator,
            coins_interval=config.coins_interval_seconds,
            global_interval=config.global_interval_seconds,
        )

    @property
    def running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self) -> None:
        """Spawn the per-kind loops. Must be called inside a running loop."""
        if self.running:
            logger.warning("Refresh scheduler already started")
            return

        stop_event = self._stop_event = asyncio.Event()
        for kind in DataKind:
            self._wakeups[kind] = asyncio.Event()
            self._next_tick[kind] = time.monotonic()
            self._tasks[kind] = asyncio.create_task(
                self._job_loop(kind, stop_event), name=f"scheduler-{kind.value}"
            )
        logger.info(
            f"Refresh scheduler started "
            f"(coins every {self.intervals[DataKind.COINS]}s, "
            f"global every {self.intervals[DataKind.GLOBAL]}s)"
        )

    async def stop(self, timeout: float = 6.0) -> None:
        """Signal the loops to exit, cancelling any still running after ``timeout``."""
        if self._stop_event is None:
            return

        self._stop_event.set()
        for wakeup in self._wakeups.values():
            wakeup.set()

        tasks = list(self._tasks.values())
        try:
            await asyncio.wait_for(
                asyncio.gather(*tasks, return_exceptions=True), timeout=timeout
            )
        except TimeoutError:
            logger.warning("Scheduler loops did not stop in time; cancelling")
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        self._tasks.clear()
        logger.info("Refresh scheduler stopped")

    async def refresh_now(self, kind: DataKind) -> MarketSnapshot:
        """
        Refresh ``kind`` immediately and restart its timer.

        Joins an in-flight refresh rather than starting a second one.
        """
        snapshot = await self._run(kind)
        wakeup = self._wakeups.get(kind)
        if wakeup is not None:
            wakeup.set()
        return snapshot

    async def _job_loop(self, kind: DataKind, stop_event: asyncio.Event) -> None:
        wakeup = self._wakeups[kind]

        while not stop_event.is_set():
            delay = self._next_tick[kind] - time.monotonic()
            if delay > 0:
                try:
                    await asyncio.wait_for(wakeup.wait(), timeout=delay)
                except TimeoutError:
                    pass
                wakeup.clear()
                continue

            await self._run(kind)

    async def _run(self, kind: DataKind) -> MarketSnapshot:
        stats = self.job_stats[kind]
        stats.last_run = datetime.now(UTC)
        stats.runs += 1
        try:
            snapshot = await self.aggregator.refresh(kind)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            stats.consecutive_failures += 1
            stats.last_error = repr(e)[:300]
            logger.exception(f"Scheduled {kind.value} refresh raised")
            return self.aggregator.snapshot
        finally:
            self._next_tick[kind] = time.monotonic() + self.intervals[kind]

        if snapshot.state_for(kind) is RefreshState.FAILED:
            stats.consecutive_failures += 1
            stats.last_error = snapshot.error_for(kind)
        else:
            stats.consecutive_failures = 0
            stats.last_success = datetime.now(UTC)
            stats.last_error = None
        return snapshot

    def info(self) -> dict[str, Any]:
        """Small, stable health payload."""
        now = time.monotonic()
        per_kind: dict[str, Any] = {}
        for kind, stats in self.job_stats.items():
            next_tick = self._next_tick.get(kind)
            per_kind[kind.value] = {
                "interval_s": stats.interval_seconds,
                "runs": stats.runs,
                "last_run": stats.last_run.isoformat() if stats.last_run else None,
                "last_success": (
                    stats.last_success.isoformat() if stats.last_success else None
                ),
                "consecutive_failures": stats.consecutive_failures,
                "last_error": stats.last_error,
                "next_run_in_s": (
                    round(max(0.0, next_tick - now), 1)
                    if self.running and next_tick is not None
                    else None
                ),
            }
        return {"running": self.running, "jobs": len(self._tasks), "per_kind": per_kind}
