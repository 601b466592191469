"""Telemetry core: aggregation, correlation, scheduling and broadcast."""

from __future__ import annotations

from routerwatch.telemetry.aggregator import SnapshotAggregator
from routerwatch.telemetry.commands import CommandExecutor
from routerwatch.telemetry.correlator import (
    UsageTracker,
    build_user_detail,
    correlate_active_ips,
    correlate_users,
)
from routerwatch.telemetry.hub import BroadcastHub, Subscriber, build_envelope
from routerwatch.telemetry.normalize import parse_byte_count, parse_disabled_flag, parse_uptime
from routerwatch.telemetry.queries import QueryFacade
from routerwatch.telemetry.scheduler import PollScheduler
from routerwatch.telemetry.server import StreamServer
from routerwatch.telemetry.setup import MonitorSession, build_session, monitor_session

__all__ = [
    "BroadcastHub",
    "CommandExecutor",
    "MonitorSession",
    "PollScheduler",
    "QueryFacade",
    "SnapshotAggregator",
    "StreamServer",
    "Subscriber",
    "UsageTracker",
    "build_envelope",
    "build_session",
    "build_user_detail",
    "correlate_active_ips",
    "correlate_users",
    "monitor_session",
    "parse_byte_count",
    "parse_disabled_flag",
    "parse_uptime",
]
