"""Tests for routerwatch.telemetry.normalize: pure record conversions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from routerwatch.models.router import ActiveSession, HotspotHost, LogRecord, TrafficSample
from routerwatch.telemetry.normalize import (
    UNIT_SECONDS,
    host_status,
    network_address,
    parse_byte_count,
    parse_disabled_flag,
    parse_uptime,
    to_history_entry,
    to_interface_stat,
    to_log_entry,
    to_session_detail,
)


class TestParseUptime:
    def test_empty(self) -> None:
        assert parse_uptime("") == 0
        assert parse_uptime(None) == 0

    def test_hours_minutes(self) -> None:
        assert parse_uptime("2h30m") == 9000

    def test_every_unit(self) -> None:
        assert parse_uptime("1w2d3h4m5s") == 604800 + 2 * 86400 + 3 * 3600 + 4 * 60 + 5

    @pytest.mark.parametrize(
        "runs",
        [
            [(3, "w")],
            [(1, "h"), (59, "m"), (59, "s")],
            [(12, "w"), (0, "h"), (7, "s")],
            [(45, "m")],
        ],
    )
    def test_weighted_sum(self, runs: list[tuple[int, str]]) -> None:
        text = "".join(f"{value}{unit}" for value, unit in runs)
        assert parse_uptime(text) == sum(value * UNIT_SECONDS[unit] for value, unit in runs)

    def test_unknown_unit_is_skipped(self) -> None:
        assert parse_uptime("5x3s") == 3

    def test_case_insensitive(self) -> None:
        assert parse_uptime("2H") == 7200

    def test_clock_suffix(self) -> None:
        assert parse_uptime("1d02:03:04") == 86400 + 2 * 3600 + 3 * 60 + 4

    def test_bare_clock(self) -> None:
        assert parse_uptime("00:05:00") == 300

    def test_garbage(self) -> None:
        assert parse_uptime("never") == 0


class TestParseByteCount:
    def test_absent(self) -> None:
        assert parse_byte_count(None) == 0
        assert parse_byte_count("") == 0

    def test_decimal(self) -> None:
        assert parse_byte_count("1024") == 1024

    def test_int_passthrough(self) -> None:
        assert parse_byte_count(42) == 42

    def test_garbage_is_zero(self) -> None:
        assert parse_byte_count("lots") == 0

    def test_negative_clamped(self) -> None:
        assert parse_byte_count("-5") == 0


class TestParseDisabledFlag:
    @pytest.mark.parametrize("value", ["true", "TRUE", " yes ", True])
    def test_true_tokens(self, value: object) -> None:
        assert parse_disabled_flag(value) is True

    @pytest.mark.parametrize("value", ["false", "no", "", None, 1, False])
    def test_everything_else_is_false(self, value: object) -> None:
        assert parse_disabled_flag(value) is False


class TestNetworkAddress:
    def test_strips_prefix(self) -> None:
        assert network_address("192.168.88.1/24") == "192.168.88.1"

    def test_plain_address(self) -> None:
        assert network_address("10.0.0.1") == "10.0.0.1"

    def test_missing(self) -> None:
        assert network_address(None) is None
        assert network_address("") is None


class TestConversions:
    def test_interface_stat(self) -> None:
        sample = TrafficSample.model_validate(
            {"name": "ether1", "rx-bits-per-second": "1500000", "tx-bits-per-second": "bad"}
        )
        stat = to_interface_stat("ether1", sample)
        assert stat.name == "ether1"
        assert stat.rx_bits_per_second == 1500000
        assert stat.tx_bits_per_second == 0
        assert stat.rx_kbps == 1500.0

    def test_session_detail_login_time(self) -> None:
        now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        session = ActiveSession.model_validate(
            {
                ".id": "*20",
                "user": "alice",
                "address": "192.168.88.10",
                "mac-address": "AA:BB:CC:00:00:01",
                "uptime": "1h",
                "bytes-in": "10",
                "bytes-out": "20",
            }
        )
        detail = to_session_detail(session, now)
        assert detail.login_time == now - timedelta(hours=1)
        assert detail.uptime_seconds == 3600
        assert detail.session_id == "*20"
        assert (detail.bytes_in, detail.bytes_out) == (10, 20)

    @pytest.mark.parametrize(
        ("authorized", "bypassed", "expected"),
        [
            ("true", "false", "authorized"),
            ("false", "true", "bypassed"),
            ("true", "true", "bypassed"),
            (None, None, "unauthorized"),
        ],
    )
    def test_host_status(
        self, authorized: str | None, bypassed: str | None, expected: str
    ) -> None:
        host = HotspotHost(authorized=authorized, bypassed=bypassed)
        assert host_status(host) == expected

    def test_history_entry_falls_back_to_idle_time(self) -> None:
        host = HotspotHost.model_validate(
            {
                "address": "192.168.88.10",
                "mac-address": "AA:BB:CC:00:00:01",
                "to-address": "10.5.50.10",
                "idle-time": "10s",
                "authorized": "true",
            }
        )
        entry = to_history_entry(host)
        assert entry.last_seen == "10s"
        assert entry.host == "10.5.50.10"
        assert entry.status == "authorized"

    def test_log_entry_topics(self) -> None:
        record = LogRecord.model_validate(
            {".id": "*1", "time": "12:00:01", "topics": "hotspot,info,", "message": "hi"}
        )
        entry = to_log_entry(record)
        assert entry.topics == ("hotspot", "info")
        assert entry.message == "hi"

    def test_log_entry_without_topics(self) -> None:
        assert to_log_entry(LogRecord()).topics == ()
