"""Tests for PollScheduler: fixed cadence, never overlapping cycles."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest

from routerwatch.models.snapshot import TelemetrySnapshot
from routerwatch.telemetry.aggregator import SnapshotAggregator
from routerwatch.telemetry.scheduler import PollScheduler

if TYPE_CHECKING:
    from routerwatch.api.router import RouterAPI


class _GatedAggregator:
    """Aggregator stand-in whose cycles finish only when the gate opens."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.calls = 0
        self._sequence = 0

    async def take_snapshot(self) -> TelemetrySnapshot:
        self.calls += 1
        await self.gate.wait()
        self._sequence += 1
        return TelemetrySnapshot(taken_at=datetime.now(UTC), sequence_number=self._sequence)


class _FailingAggregator:
    async def take_snapshot(self) -> TelemetrySnapshot:
        raise RuntimeError("boom")


def _scheduler(aggregator: Any, on_snapshot: Any, interval: float = 1.0) -> PollScheduler:
    return PollScheduler(aggregator, on_snapshot, interval=interval)


class TestTick:
    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            _scheduler(_GatedAggregator(), AsyncMock(), interval=0)

    async def test_overlapping_tick_is_skipped(self) -> None:
        aggregator = _GatedAggregator()
        on_snapshot = AsyncMock()
        scheduler = _scheduler(aggregator, on_snapshot)

        assert scheduler.tick() is True
        await asyncio.sleep(0)
        assert scheduler.cycle_in_flight

        assert scheduler.tick() is False
        assert scheduler.tick() is False
        assert scheduler.missed_count == 2
        assert aggregator.calls == 1

        aggregator.gate.set()
        await scheduler.wait_for_cycle()
        on_snapshot.assert_awaited_once()
        assert not scheduler.cycle_in_flight

        assert scheduler.tick() is True
        await scheduler.wait_for_cycle()
        assert aggregator.calls == 2
        assert scheduler.cycle_count == 2

    async def test_failed_cycle_is_counted_not_delivered(self) -> None:
        on_snapshot = AsyncMock()
        scheduler = _scheduler(_FailingAggregator(), on_snapshot)

        scheduler.tick()
        await scheduler.wait_for_cycle()

        assert scheduler.failed_count == 1
        on_snapshot.assert_not_awaited()

    async def test_delivery_failure_does_not_break_the_cycle(self) -> None:
        aggregator = _GatedAggregator()
        aggregator.gate.set()
        on_snapshot = AsyncMock(side_effect=RuntimeError("subscriber exploded"))
        scheduler = _scheduler(aggregator, on_snapshot)

        scheduler.tick()
        await scheduler.wait_for_cycle()
        scheduler.tick()
        await scheduler.wait_for_cycle()

        assert on_snapshot.await_count == 2
        assert scheduler.failed_count == 0


class TestLoop:
    async def test_start_and_stop(self, router_api: RouterAPI) -> None:
        published: list[int] = []

        async def on_snapshot(snapshot: TelemetrySnapshot) -> None:
            published.append(snapshot.sequence_number)

        scheduler = PollScheduler(SnapshotAggregator(router_api), on_snapshot, interval=0.02)
        scheduler.start()
        scheduler.start()  # no-op while running
        assert scheduler.is_running

        await asyncio.sleep(0.15)
        await scheduler.stop()

        assert not scheduler.is_running
        assert scheduler.cycle_count >= 2
        assert len(published) >= 2
        assert published == sorted(set(published))

    async def test_stop_cancels_in_flight_cycle(self) -> None:
        aggregator = _GatedAggregator()
        on_snapshot = AsyncMock()
        scheduler = _scheduler(aggregator, on_snapshot, interval=0.01)

        scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert aggregator.calls == 1
        assert scheduler.missed_count >= 1
        on_snapshot.assert_not_awaited()
        assert not scheduler.cycle_in_flight
