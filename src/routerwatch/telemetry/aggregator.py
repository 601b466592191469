"""Snapshot aggregation: one consistent, immutable snapshot per poll cycle.

All sources are fetched concurrently.  A failing or slow source degrades
only its own section to empty; the remaining sections still populate.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

from routerwatch.models.snapshot import TelemetrySnapshot
from routerwatch.telemetry.correlator import (
    UsageTracker,
    correlate_active_ips,
    correlate_users,
)
from routerwatch.telemetry.normalize import parse_disabled_flag, to_interface_stat

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from routerwatch.api.router import RouterAPI
    from routerwatch.models.snapshot import InterfaceStat

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class SnapshotAggregator:
    """Builds and publishes :class:`TelemetrySnapshot` objects.

    Parameters:
        api: Router API used for every source query.
        section_timeout: Seconds each section may take before it degrades
            to empty.
    """

    def __init__(self, api: RouterAPI, *, section_timeout: float = 5.0) -> None:
        self._api = api
        self._section_timeout = section_timeout
        self._usage = UsageTracker()
        self._latest: TelemetrySnapshot | None = None
        self._sequence = 0
        self._last_failures: tuple[str, ...] = ()

    @property
    def latest(self) -> TelemetrySnapshot | None:
        """The most recently published snapshot, or ``None`` before the first poll."""
        return self._latest

    @property
    def last_failures(self) -> tuple[str, ...]:
        """Names of the sections that degraded during the last cycle."""
        return self._last_failures

    async def take_snapshot(self) -> TelemetrySnapshot:
        """Fetch every source, correlate, and publish a new snapshot."""
        failures: list[str] = []
        addresses, leases, interfaces, users, sessions = await asyncio.gather(
            self._section("addresses", self._api.ip_addresses(), failures),
            self._section("dhcp-leases", self._api.dhcp_leases(), failures),
            self._section("interface-traffic", self._interface_traffic(), failures),
            self._section("hotspot-users", self._api.hotspot_users(), failures),
            self._section("active-sessions", self._api.active_sessions(), failures),
        )

        now = datetime.now(UTC)
        active_ips = correlate_active_ips(addresses, leases)
        usage = self._usage.sample(active_ips, sessions, now)
        views = correlate_users(users, sessions)

        # Numbering and publication happen without a suspension point in
        # between, so the latest snapshot always has the highest number.
        self._sequence += 1
        snapshot = TelemetrySnapshot(
            interfaces=tuple(interfaces),
            active_ips=active_ips,
            usage_by_ip=usage,
            users=tuple(views),
            taken_at=now,
            sequence_number=self._sequence,
        )
        self._latest = snapshot
        self._last_failures = tuple(failures)

        logger.debug(
            "Snapshot #%d: %d interfaces, %d active IPs, %d users (degraded: %s)",
            snapshot.sequence_number,
            len(snapshot.interfaces),
            len(snapshot.active_ips),
            len(snapshot.users),
            ", ".join(failures) or "none",
        )
        return snapshot

    async def _section(
        self, name: str, source: Awaitable[list[_T]], failures: list[str]
    ) -> list[_T]:
        try:
            return await asyncio.wait_for(source, timeout=self._section_timeout)
        except TimeoutError:
            logger.warning(
                "Snapshot section %s timed out after %.1fs", name, self._section_timeout
            )
        except Exception as exc:
            logger.warning("Snapshot section %s failed: %s", name, exc, exc_info=True)
        failures.append(name)
        return []

    async def _interface_traffic(self) -> list[InterfaceStat]:
        """Sample every enabled interface; any failed sample fails the section.

        Requests fan out one per interface; the client's concurrency limit
        bounds how many are in flight.
        """
        interfaces = [
            iface
            for iface in await self._api.interfaces()
            if not parse_disabled_flag(iface.disabled)
        ]
        results: list[Any] = await asyncio.gather(
            *(self._api.monitor_traffic(iface.name) for iface in interfaces),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return [
            to_interface_stat(iface.name, sample)
            for iface, sample in zip(interfaces, results, strict=True)
        ]
