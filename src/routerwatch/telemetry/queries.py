"""Synchronous read API over the aggregator and the live router.

Freshness policy:

* ``network_data`` and ``list_users`` serve the cached snapshot (a snapshot
  is taken on demand only before the first poll has completed).
* ``get_user_detail`` and ``logs`` always query the router, since session and
  history detail is requested rarely and should be current.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from routerwatch.telemetry.correlator import build_user_detail
from routerwatch.telemetry.normalize import to_log_entry

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from routerwatch.api.router import RouterAPI
    from routerwatch.models.snapshot import LogEntry, TelemetrySnapshot, UserDetail, UserView
    from routerwatch.telemetry.aggregator import SnapshotAggregator

logger = logging.getLogger(__name__)


class QueryFacade:
    def __init__(self, api: RouterAPI, aggregator: SnapshotAggregator) -> None:
        self._api = api
        self._aggregator = aggregator

    async def network_data(self) -> TelemetrySnapshot:
        """Return the latest snapshot, taking one if none exists yet."""
        snapshot = self._aggregator.latest
        if snapshot is None:
            snapshot = await self._aggregator.take_snapshot()
        return snapshot

    async def list_users(self) -> list[UserView]:
        snapshot = await self.network_data()
        return list(snapshot.users)

    async def get_user_detail(self, username: str) -> UserDetail | None:
        """Fetch and correlate one user's sessions and host history.

        The user lookup must succeed; session and host failures degrade to
        empty lists.
        """
        users, sessions, hosts = await asyncio.gather(
            self._api.hotspot_users(name=username),
            self._degrade("active-sessions", username, self._api.active_sessions(user=username)),
            self._degrade("hotspot-hosts", username, self._api.hotspot_hosts()),
        )
        return build_user_detail(username, users, sessions, hosts, now=datetime.now(UTC))

    async def logs(self) -> list[LogEntry]:
        return [to_log_entry(record) for record in await self._api.logs()]

    @staticmethod
    async def _degrade(name: str, target: str, source: Awaitable[list[Any]]) -> list[Any]:
        try:
            return await source
        except Exception as exc:
            logger.warning("Detail section %s for %s failed: %s", name, target, exc)
            return []
