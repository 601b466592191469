"""Pure conversions from raw router records to domain entities.

No I/O.  RouterOS reports every value as a string: durations as runs such
as ``"1w2d3h4m5s"``, counters as decimal strings and flags as
``"true"``/``"false"``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from routerwatch.models.snapshot import HistoryEntry, InterfaceStat, LogEntry, SessionDetail

if TYPE_CHECKING:
    from routerwatch.models.router import ActiveSession, HotspotHost, LogRecord, TrafficSample

logger = logging.getLogger(__name__)

UNIT_SECONDS: dict[str, int] = {
    "w": 604800,
    "d": 86400,
    "h": 3600,
    "m": 60,
    "s": 1,
}

_RUN = re.compile(r"(\d+)([a-z]+)")
_CLOCK = re.compile(r"(\d+):(\d{2}):(\d{2})$")

_TRUE_TOKENS = frozenset({"true", "yes"})


def parse_uptime(text: str | None) -> int:
    """Convert a RouterOS duration to whole seconds.

    Each ``<integer><unit>`` run contributes ``value * UNIT_SECONDS[unit]``;
    runs with an unknown unit are skipped.  A trailing ``HH:MM:SS`` clock
    (RouterOS v6 style, e.g. ``"1d02:03:04"``) is also accepted.

    >>> parse_uptime("2h30m")
    9000
    >>> parse_uptime("")
    0
    """
    if not text:
        return 0
    text = text.strip().lower()
    total = 0

    clock = _CLOCK.search(text)
    if clock is not None:
        hours, minutes, seconds = (int(g) for g in clock.groups())
        total += hours * 3600 + minutes * 60 + seconds
        text = text[: clock.start()]

    for value, unit in _RUN.findall(text):
        factor = UNIT_SECONDS.get(unit)
        if factor is None:
            continue
        total += int(value) * factor
    return total


def parse_byte_count(text: str | int | None) -> int:
    """Parse a counter value; absent, empty or garbage input yields 0."""
    if text is None or text == "":
        return 0
    try:
        return max(0, int(text))
    except (TypeError, ValueError):
        logger.debug("Unparseable byte count: %r", text)
        return 0


def parse_disabled_flag(text: Any) -> bool:
    """Return ``True`` iff *text* is the router's boolean-true token."""
    if isinstance(text, bool):
        return text
    if not isinstance(text, str):
        return False
    return text.strip().lower() in _TRUE_TOKENS


def network_address(address: str | None) -> str | None:
    """Strip the prefix length from ``"192.168.88.1/24"``."""
    if not address:
        return None
    return address.split("/", 1)[0] or None


def to_interface_stat(name: str, sample: TrafficSample) -> InterfaceStat:
    return InterfaceStat(
        name=name,
        rx_bits_per_second=parse_byte_count(sample.rx_bits_per_second),
        tx_bits_per_second=parse_byte_count(sample.tx_bits_per_second),
    )


def to_session_detail(session: ActiveSession, now: datetime) -> SessionDetail:
    """Build a session view; login time is derived from the session uptime."""
    uptime = parse_uptime(session.uptime)
    return SessionDetail(
        ip_address=session.address,
        mac_address=session.mac_address,
        login_time=now - timedelta(seconds=uptime),
        uptime_seconds=uptime,
        session_id=session.id,
        bytes_in=parse_byte_count(session.bytes_in),
        bytes_out=parse_byte_count(session.bytes_out),
    )


def host_status(host: HotspotHost) -> str:
    if parse_disabled_flag(host.bypassed):
        return "bypassed"
    if parse_disabled_flag(host.authorized):
        return "authorized"
    return "unauthorized"


def to_history_entry(host: HotspotHost) -> HistoryEntry:
    return HistoryEntry(
        ip_address=host.address,
        mac_address=host.mac_address,
        last_seen=host.last_seen or host.idle_time,
        status=host_status(host),
        host=host.host_name or host.to_address,
        bytes_in=parse_byte_count(host.bytes_in),
        bytes_out=parse_byte_count(host.bytes_out),
    )


def to_log_entry(record: LogRecord) -> LogEntry:
    topics = tuple(t for t in (record.topics or "").split(",") if t)
    return LogEntry(id=record.id, time=record.time, topics=topics, message=record.message)
