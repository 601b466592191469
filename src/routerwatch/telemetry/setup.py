"""Reusable monitoring session lifecycle.

Wires the whole pipeline around one shared router client::

    client → RouterAPI → SnapshotAggregator → PollScheduler → BroadcastHub → StreamServer

Usage::

    async with monitor_session(settings) as session:
        app = create_app(session)
        await serve_forever()
    # cleanup is guaranteed (scheduler stop → stream server stop → client close)
"""

from __future__ import annotations

import contextlib
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from routerwatch.api.client import RouterClient
from routerwatch.api.router import RouterAPI
from routerwatch.telemetry.aggregator import SnapshotAggregator
from routerwatch.telemetry.commands import CommandExecutor
from routerwatch.telemetry.hub import BroadcastHub
from routerwatch.telemetry.queries import QueryFacade
from routerwatch.telemetry.scheduler import PollScheduler
from routerwatch.telemetry.server import StreamServer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from routerwatch.api.client import TelemetrySource
    from routerwatch.models.config import AppSettings

logger = logging.getLogger(__name__)


@dataclass
class MonitorSession:
    """Running components exposed to the REST layer and the CLI."""

    source: TelemetrySource
    api: RouterAPI
    aggregator: SnapshotAggregator
    hub: BroadcastHub
    scheduler: PollScheduler
    queries: QueryFacade
    commands: CommandExecutor
    stream: StreamServer | None = None


def build_session(
    settings: AppSettings, source: TelemetrySource | None = None
) -> MonitorSession:
    """Assemble (but do not start) every component from *settings*."""
    if source is None:
        source = RouterClient.from_settings(settings)
    api = RouterAPI(source)
    aggregator = SnapshotAggregator(api, section_timeout=settings.query_timeout)
    hub = BroadcastHub(queue_size=settings.subscriber_queue_size)
    scheduler = PollScheduler(aggregator, hub.publish, interval=settings.poll_interval)
    return MonitorSession(
        source=source,
        api=api,
        aggregator=aggregator,
        hub=hub,
        scheduler=scheduler,
        queries=QueryFacade(api, aggregator),
        commands=CommandExecutor(api),
    )


@asynccontextmanager
async def monitor_session(
    settings: AppSettings,
    *,
    source: TelemetrySource | None = None,
    stream: bool = True,
    poll: bool = True,
) -> AsyncIterator[MonitorSession]:
    """Start polling and streaming; tear everything down on exit.

    An unreachable router does not prevent startup: connect failures are
    logged and retried on every poll cycle.
    """
    session = build_session(settings, source)
    try:
        if stream:
            session.stream = StreamServer(
                session.hub, host=settings.stream_host, port=settings.stream_port
            )
            await session.stream.start()

        try:
            await session.source.connect()
        except Exception as exc:
            logger.warning("Router not reachable yet (%s); will retry each cycle", exc)

        if poll:
            session.scheduler.start()

        yield session

    finally:
        # Cleanup in reverse order.
        await session.scheduler.stop()
        if session.stream is not None:
            with contextlib.suppress(Exception):
                await session.stream.stop()
        await session.source.close()
