"""Tests for routerwatch.api.router: RouterAPI record parsing."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from routerwatch.api.router import RouterAPI
from routerwatch.models.router import TrafficSample


@pytest.fixture
def source() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def api(source: AsyncMock) -> RouterAPI:
    return RouterAPI(source)


class TestReads:
    async def test_hotspot_users_parses_dashed_keys(
        self, api: RouterAPI, source: AsyncMock
    ) -> None:
        source.query.return_value = [
            {".id": "*1", "name": "alice", "bytes-in": "10", "limit-bytes-out": "99", "extra": "x"}
        ]

        users = await api.hotspot_users()

        assert users[0].id == "*1"
        assert users[0].bytes_in == "10"
        assert users[0].limit_bytes_out == "99"
        assert users[0].model_extra == {"extra": "x"}
        source.query.assert_awaited_once_with("/ip/hotspot/user/print", None)

    async def test_malformed_records_are_skipped(self, api: RouterAPI, source: AsyncMock) -> None:
        source.query.return_value = [{"profile": "no-name"}, {"name": "bob"}]
        users = await api.hotspot_users()
        assert [u.name for u in users] == ["bob"]

    async def test_filters(self, api: RouterAPI, source: AsyncMock) -> None:
        source.query.return_value = []
        await api.hotspot_users(name="alice")
        await api.active_sessions(user="alice")
        calls = [c.args for c in source.query.await_args_list]
        assert calls[0] == ("/ip/hotspot/user/print", {"name": "alice"})
        assert calls[1] == ("/ip/hotspot/active/print", {"user": "alice"})

    async def test_find_user_requires_exact_name(self, api: RouterAPI, source: AsyncMock) -> None:
        source.query.return_value = [{"name": "alice2"}]
        assert await api.find_user("alice") is None

    async def test_monitor_traffic(self, api: RouterAPI, source: AsyncMock) -> None:
        source.query.return_value = [{"name": "ether1", "rx-bits-per-second": "800"}]

        sample = await api.monitor_traffic("ether1")

        assert sample.rx_bits_per_second == "800"
        source.query.assert_awaited_once_with(
            "/interface/monitor-traffic", {"interface": "ether1", "once": "true"}
        )

    async def test_monitor_traffic_without_data(self, api: RouterAPI, source: AsyncMock) -> None:
        source.query.return_value = []
        assert await api.monitor_traffic("wlan1") == TrafficSample(name="wlan1")

    @pytest.mark.parametrize(
        ("method", "command"),
        [
            ("ip_addresses", "/ip/address/print"),
            ("dhcp_leases", "/ip/dhcp-server/lease/print"),
            ("interfaces", "/interface/print"),
            ("hotspot_hosts", "/ip/hotspot/host/print"),
            ("logs", "/log/print"),
        ],
    )
    async def test_commands(
        self, api: RouterAPI, source: AsyncMock, method: str, command: str
    ) -> None:
        source.query.return_value = []
        assert await getattr(api, method)() == []
        assert source.query.await_args.args[0] == command


class TestWrites:
    async def test_set_user_disabled(self, api: RouterAPI, source: AsyncMock) -> None:
        await api.set_user_disabled("*1", True)
        await api.set_user_disabled("*1", False)
        assert source.mutate.await_args_list[0].args == (
            "/ip/hotspot/user/set",
            {".id": "*1", "disabled": "true"},
        )
        assert source.mutate.await_args_list[1].args[1]["disabled"] == "false"

    async def test_remove_user(self, api: RouterAPI, source: AsyncMock) -> None:
        await api.remove_user("*1")
        source.mutate.assert_awaited_once_with("/ip/hotspot/user/remove", {".id": "*1"})
