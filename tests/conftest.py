"""Shared fixtures: an in-memory router that speaks the TelemetrySource protocol."""

from __future__ import annotations

import asyncio
import copy
from typing import TYPE_CHECKING, Any

import pytest

from routerwatch.api.errors import ConnectError, MutateError, QueryError
from routerwatch.api.router import RouterAPI
from routerwatch.models.config import AppSettings

if TYPE_CHECKING:
    from collections.abc import Mapping

Record = dict[str, Any]

HOTSPOT_TABLES: dict[str, list[Record]] = {
    "/ip/address/print": [
        {
            ".id": "*1",
            "address": "192.168.88.1/24",
            "network": "192.168.88.0",
            "interface": "bridge",
        },
    ],
    "/ip/dhcp-server/lease/print": [
        {
            ".id": "*A",
            "address": "192.168.88.10",
            "active-address": "192.168.88.10",
            "mac-address": "AA:BB:CC:00:00:01",
            "host-name": "alice-laptop",
            "status": "bound",
        },
        {
            ".id": "*B",
            "address": "192.168.88.20",
            "mac-address": "AA:BB:CC:00:00:02",
            "status": "waiting",
        },
    ],
    "/interface/print": [
        {".id": "*1", "name": "ether1", "type": "ether", "disabled": "false"},
        {".id": "*2", "name": "wlan1", "type": "wlan", "disabled": "false"},
        {".id": "*3", "name": "ether5", "type": "ether", "disabled": "true"},
    ],
    "/ip/hotspot/user/print": [
        {
            ".id": "*10",
            "name": "alice",
            "profile": "default",
            "uptime": "1h2m3s",
            "bytes-in": "2048",
            "bytes-out": "4096",
            "disabled": "false",
            "comment": "front desk",
        },
        {
            ".id": "*11",
            "name": "bob",
            "profile": "guest",
            "uptime": "0s",
            "bytes-in": "0",
            "bytes-out": "0",
            "disabled": "true",
            "limit-bytes-in": "1000000",
        },
    ],
    "/ip/hotspot/active/print": [
        {
            ".id": "*20",
            "user": "alice",
            "address": "192.168.88.10",
            "mac-address": "AA:BB:CC:00:00:01",
            "uptime": "5m",
            "bytes-in": "1000",
            "bytes-out": "5000",
        },
    ],
    "/ip/hotspot/host/print": [
        {
            ".id": "*30",
            "address": "192.168.88.10",
            "mac-address": "aa:bb:cc:00:00:01",
            "to-address": "10.5.50.10",
            "host-name": "alice-laptop",
            "idle-time": "10s",
            "authorized": "true",
            "bypassed": "false",
        },
        {
            ".id": "*31",
            "address": "192.168.88.30",
            "mac-address": "AA:BB:CC:00:00:03",
            "authorized": "false",
            "bypassed": "false",
        },
    ],
    "/log/print": [
        {".id": "*40", "time": "12:00:01", "topics": "hotspot,info", "message": "alice logged in"},
        {
            ".id": "*41",
            "time": "12:00:05",
            "topics": "system,info,account",
            "message": "user admin logged in via api",
        },
    ],
}

TRAFFIC: dict[str, Record] = {
    "ether1": {"rx-bits-per-second": "1500000", "tx-bits-per-second": "250000"},
    "wlan1": {"rx-bits-per-second": "64000", "tx-bits-per-second": "32000"},
}


class FakeSource:
    """In-memory router.

    ``failing`` holds commands that raise; ``delays`` maps commands to a
    sleep before answering.  Mutations are recorded and applied to the
    user table so the next poll observes them.
    """

    def __init__(
        self,
        tables: Mapping[str, list[Record]] | None = None,
        traffic: Mapping[str, Record] | None = None,
    ) -> None:
        self.tables: dict[str, list[Record]] = copy.deepcopy(
            dict(tables if tables is not None else HOTSPOT_TABLES)
        )
        self.traffic: dict[str, Record] = copy.deepcopy(
            dict(traffic if traffic is not None else TRAFFIC)
        )
        self.failing: set[str] = set()
        self.delays: dict[str, float] = {}
        self.queries: list[tuple[str, dict[str, str] | None]] = []
        self.mutations: list[tuple[str, dict[str, str]]] = []
        self.connect_error: Exception | None = None
        self.connect_calls = 0
        self.closed = False
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True

    async def query(
        self, command: str, filters: Mapping[str, str] | None = None
    ) -> list[Record]:
        self.queries.append((command, dict(filters) if filters else None))
        if command in self.delays:
            await asyncio.sleep(self.delays[command])
        if self.connect_error is not None:
            raise self.connect_error
        if command in self.failing:
            raise QueryError(f"{command} failed", command=command)

        if command == "/interface/monitor-traffic":
            name = (filters or {})["interface"]
            sample = self.traffic.get(name)
            return [{"name": name, **sample}] if sample is not None else []

        rows = self.tables.get(command, [])
        if filters:
            rows = [r for r in rows if all(r.get(k) == v for k, v in filters.items())]
        return copy.deepcopy(rows)

    async def mutate(self, command: str, fields: Mapping[str, str]) -> None:
        self.mutations.append((command, dict(fields)))
        if command in self.failing:
            raise MutateError(f"{command} rejected", command=command, status_code=400)

        users = self.tables.setdefault("/ip/hotspot/user/print", [])
        target = fields.get(".id")
        if command == "/ip/hotspot/user/set":
            for user in users:
                if user.get(".id") == target:
                    user.update({k: v for k, v in fields.items() if k != ".id"})
        elif command == "/ip/hotspot/user/remove":
            self.tables["/ip/hotspot/user/print"] = [u for u in users if u.get(".id") != target]

    async def close(self) -> None:
        self.closed = True
        self._connected = False


@pytest.fixture()
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture()
def router_api(fake_source: FakeSource) -> RouterAPI:
    return RouterAPI(fake_source)


@pytest.fixture()
def settings() -> AppSettings:
    """Settings that never read a developer's .env file."""
    return AppSettings(
        _env_file=None,  # type: ignore[call-arg]
        router_host="router.test",
        poll_interval=0.05,
        query_timeout=0.5,
        http_host="127.0.0.1",
        stream_host="127.0.0.1",
        stream_port=0,
    )


@pytest.fixture()
def unreachable() -> ConnectError:
    return ConnectError("Cannot reach router at http://router.test/rest: refused")
