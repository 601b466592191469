"""Fixed-cadence poll loop driving the snapshot aggregator.

Cycles never overlap: a tick that fires while the previous cycle is still
running is skipped and counted as missed, never queued.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from routerwatch.models.snapshot import TelemetrySnapshot
    from routerwatch.telemetry.aggregator import SnapshotAggregator

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0


class PollScheduler:
    """Runs ``take_snapshot()`` once per tick and hands results to *on_snapshot*.

    Parameters:
        aggregator: Snapshot source.
        on_snapshot: Async callback receiving each completed snapshot
            (normally :meth:`BroadcastHub.publish`).
        interval: Seconds between ticks.
    """

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        on_snapshot: Callable[[TelemetrySnapshot], Awaitable[object]],
        *,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._aggregator = aggregator
        self._on_snapshot = on_snapshot
        self._interval = interval
        self._loop_task: asyncio.Task[None] | None = None
        self._cycle_task: asyncio.Task[None] | None = None
        self._cycle_count = 0
        self._missed_count = 0
        self._failed_count = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cycle_count(self) -> int:
        """Cycles started since the scheduler was created."""
        return self._cycle_count

    @property
    def missed_count(self) -> int:
        """Ticks skipped because the previous cycle was still running."""
        return self._missed_count

    @property
    def failed_count(self) -> int:
        return self._failed_count

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    def tick(self) -> bool:
        """Start one poll cycle unless one is already in flight.

        Returns ``True`` if a cycle was started.
        """
        if self.cycle_in_flight:
            self._missed_count += 1
            logger.warning(
                "Poll cycle still running after %.1fs, skipping tick (%d missed)",
                self._interval,
                self._missed_count,
            )
            return False
        self._cycle_count += 1
        self._cycle_task = asyncio.create_task(self._run_cycle(self._cycle_count))
        return True

    async def _run_cycle(self, cycle: int) -> None:
        try:
            snapshot = await self._aggregator.take_snapshot()
        except Exception:
            self._failed_count += 1
            logger.error("Poll cycle %d failed", cycle, exc_info=True)
            return
        try:
            await self._on_snapshot(snapshot)
        except Exception:
            logger.warning("Snapshot delivery failed for cycle %d", cycle, exc_info=True)

    async def _run(self) -> None:
        next_tick = time.monotonic()
        while True:
            self.tick()
            next_tick += self._interval
            delay = next_tick - time.monotonic()
            if delay < 0:
                # Fell behind (event loop stall): realign instead of bursting.
                next_tick = time.monotonic()
                delay = 0
            await asyncio.sleep(delay)

    def start(self) -> None:
        """Start ticking in a background task.  No-op if already running."""
        if self.is_running:
            return
        logger.info("Poll scheduler started (every %.1fs)", self._interval)
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop ticking and wait for an in-flight cycle to be cancelled."""
        for task in (self._loop_task, self._cycle_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._loop_task = None
        self._cycle_task = None
        logger.info(
            "Poll scheduler stopped (%d cycles, %d missed)",
            self._cycle_count,
            self._missed_count,
        )

    async def wait_for_cycle(self) -> None:
        """Wait until the in-flight cycle (if any) has finished."""
        task = self._cycle_task
        if task is not None:
            await asyncio.shield(task)
