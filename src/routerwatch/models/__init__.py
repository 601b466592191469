from __future__ import annotations

from routerwatch.models.config import AppSettings
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
from routerwatch.models.snapshot import (
    HistoryEntry,
    InterfaceStat,
    LogEntry,
    SessionDetail,
    TelemetrySnapshot,
    UsageSample,
    UserDetail,
    UserView,
)

__all__ = [
    # config
    "AppSettings",
    # router records
    "ActiveSession",
    "DhcpLease",
    "HotspotHost",
    "HotspotUser",
    "Interface",
    "IpAddress",
    "LogRecord",
    "TrafficSample",
    # snapshot
    "HistoryEntry",
    "InterfaceStat",
    "LogEntry",
    "SessionDetail",
    "TelemetrySnapshot",
    "UsageSample",
    "UserDetail",
    "UserView",
]
