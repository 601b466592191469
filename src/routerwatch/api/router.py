"""High-level router API built on top of a :class:`TelemetrySource`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from routerwatch.models.router import (
    ActiveSession,
    DhcpLease,
    HotspotHost,
    HotspotUser,
    Interface,
    IpAddress,
    LogRecord,
    TrafficSample,
)

if TYPE_CHECKING:
    from routerwatch.api.client import Record, TelemetrySource

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


def _parse(model: type[_M], records: list[Record], command: str) -> list[_M]:
    """Validate *records* into *model*, skipping (and logging) malformed rows."""
    parsed: list[_M] = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError:
            logger.warning("Skipping malformed %s record: %r", command, record)
    return parsed


class RouterAPI:
    """Router read/write operations (composition over a TelemetrySource)."""

    def __init__(self, source: TelemetrySource) -> None:
        self._source = source

    @property
    def source(self) -> TelemetrySource:
        return self._source

    async def ip_addresses(self) -> list[IpAddress]:
        """Return statically configured interface addresses."""
        command = "/ip/address/print"
        return _parse(IpAddress, await self._source.query(command), command)

    async def dhcp_leases(self) -> list[DhcpLease]:
        command = "/ip/dhcp-server/lease/print"
        return _parse(DhcpLease, await self._source.query(command), command)

    async def interfaces(self) -> list[Interface]:
        command = "/interface/print"
        return _parse(Interface, await self._source.query(command), command)

    async def monitor_traffic(self, interface: str) -> TrafficSample:
        """Take one throughput sample for *interface*."""
        command = "/interface/monitor-traffic"
        records = await self._source.query(command, {"interface": interface, "once": "true"})
        samples = _parse(TrafficSample, records, command)
        if not samples:
            return TrafficSample(name=interface)
        return samples[0]

    async def hotspot_users(self, *, name: str | None = None) -> list[HotspotUser]:
        """Return hotspot users, optionally only the one called *name*."""
        command = "/ip/hotspot/user/print"
        filters = {"name": name} if name is not None else None
        return _parse(HotspotUser, await self._source.query(command, filters), command)

    async def active_sessions(self, *, user: str | None = None) -> list[ActiveSession]:
        """Return active hotspot sessions, optionally only those of *user*."""
        command = "/ip/hotspot/active/print"
        filters = {"user": user} if user is not None else None
        return _parse(ActiveSession, await self._source.query(command, filters), command)

    async def hotspot_hosts(self) -> list[HotspotHost]:
        """Return the hotspot host table (connection history per device)."""
        command = "/ip/hotspot/host/print"
        return _parse(HotspotHost, await self._source.query(command), command)

    async def logs(self) -> list[LogRecord]:
        command = "/log/print"
        return _parse(LogRecord, await self._source.query(command), command)

    async def find_user(self, name: str) -> HotspotUser | None:
        """Fetch a single hotspot user by exact name from the live device."""
        for user in await self.hotspot_users(name=name):
            if user.name == name:
                return user
        return None

    async def set_user_disabled(self, user_id: str, disabled: bool) -> None:
        await self._source.mutate(
            "/ip/hotspot/user/set",
            {".id": user_id, "disabled": "true" if disabled else "false"},
        )

    async def remove_user(self, user_id: str) -> None:
        await self._source.mutate("/ip/hotspot/user/remove", {".id": user_id})
