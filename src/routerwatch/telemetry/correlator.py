"""Join records from independent router sources into unified views.

Correlation keys are the hotspot username, IP address and MAC address.
Nothing is cached between cycles except the per-IP byte counters kept by
:class:`UsageTracker`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from routerwatch.models.snapshot import UsageSample, UserDetail, UserView
from routerwatch.telemetry.normalize import (
    network_address,
    parse_byte_count,
    parse_disabled_flag,
    parse_uptime,
    to_history_entry,
    to_session_detail,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from routerwatch.models.router import (
        ActiveSession,
        DhcpLease,
        HotspotHost,
        HotspotUser,
        IpAddress,
    )

logger = logging.getLogger(__name__)


def _sessions_by_user(sessions: Iterable[ActiveSession]) -> dict[str, list[ActiveSession]]:
    index: dict[str, list[ActiveSession]] = defaultdict(list)
    for session in sessions:
        if session.user:
            index[session.user].append(session)
    return index


def _user_view(user: HotspotUser, sessions: Sequence[ActiveSession]) -> dict[str, object]:
    return {
        "username": user.name,
        "profile": user.profile or "",
        "uptime_seconds": parse_uptime(user.uptime),
        "bytes_in": parse_byte_count(user.bytes_in),
        "bytes_out": parse_byte_count(user.bytes_out),
        "disabled": parse_disabled_flag(user.disabled),
        "comment": user.comment or "",
        "limit_bytes_in": parse_byte_count(user.limit_bytes_in),
        "limit_bytes_out": parse_byte_count(user.limit_bytes_out),
        "is_online": len(sessions) > 0,
        "active_session_count": len(sessions),
        "address": sessions[0].address if sessions else None,
    }


def correlate_users(
    users: Sequence[HotspotUser], sessions: Sequence[ActiveSession]
) -> list[UserView]:
    """Attach active-session counts to each user, preserving input order."""
    index = _sessions_by_user(sessions)
    return [UserView(**_user_view(user, index.get(user.name, ()))) for user in users]


def correlate_active_ips(
    addresses: Iterable[IpAddress], leases: Iterable[DhcpLease]
) -> frozenset[str]:
    """Union of static interface addresses and active DHCP lease addresses."""
    active: set[str] = set()
    for addr in addresses:
        ip = network_address(addr.address)
        if ip:
            active.add(ip)
    for lease in leases:
        if lease.active_address:
            active.add(lease.active_address)
    return frozenset(active)


def build_user_detail(
    username: str,
    users: Sequence[HotspotUser],
    sessions: Sequence[ActiveSession],
    history: Sequence[HotspotHost],
    *,
    now: datetime,
) -> UserDetail | None:
    """Return the full detail for *username*, or ``None`` if no such user.

    All of the user's sessions are attached.  A host-table entry belongs to
    the user when its MAC is the user's bound MAC or a MAC of one of the
    user's sessions, or when its address is one of the sessions' addresses.
    """
    user = next((u for u in users if u.name == username), None)
    if user is None:
        return None

    own_sessions = [s for s in sessions if s.user == username]
    macs = {s.mac_address.upper() for s in own_sessions if s.mac_address}
    if user.mac_address:
        macs.add(user.mac_address.upper())
    addresses = {s.address for s in own_sessions if s.address}

    own_history = [
        h
        for h in history
        if (h.mac_address and h.mac_address.upper() in macs)
        or (h.address and h.address in addresses)
    ]

    return UserDetail(
        **_user_view(user, own_sessions),
        sessions=tuple(to_session_detail(s, now) for s in own_sessions),
        history=tuple(to_history_entry(h) for h in own_history),
    )


class UsageTracker:
    """Per-IP throughput from byte-counter deltas across poll cycles.

    Counters come from active hotspot sessions (``bytes-in`` is traffic
    received from the client, i.e. the client's upload).  The first sighting
    of an IP, a counter reset, or an IP without a session all report zero.
    """

    def __init__(self) -> None:
        self._previous: dict[str, tuple[int, int]] = {}
        self._previous_at: datetime | None = None

    def sample(
        self,
        active_ips: frozenset[str],
        sessions: Sequence[ActiveSession],
        now: datetime,
    ) -> dict[str, UsageSample]:
        """Return one :class:`UsageSample` per IP in *active_ips* (no others)."""
        counters: dict[str, tuple[int, int]] = {}
        for session in sessions:
            if not session.address:
                continue
            rx = parse_byte_count(session.bytes_out)
            tx = parse_byte_count(session.bytes_in)
            prev_rx, prev_tx = counters.get(session.address, (0, 0))
            counters[session.address] = (prev_rx + rx, prev_tx + tx)

        elapsed = None
        if self._previous_at is not None:
            elapsed = (now - self._previous_at).total_seconds()

        usage: dict[str, UsageSample] = {}
        for ip in active_ips:
            current = counters.get(ip)
            previous = self._previous.get(ip)
            if current is None or previous is None or not elapsed or elapsed <= 0:
                usage[ip] = UsageSample()
                continue
            rx_delta = current[0] - previous[0]
            tx_delta = current[1] - previous[1]
            if rx_delta < 0 or tx_delta < 0:
                logger.debug("Byte counters reset for %s", ip)
                usage[ip] = UsageSample()
                continue
            usage[ip] = UsageSample(rx=rx_delta / elapsed, tx=tx_delta / elapsed)

        self._previous = counters
        self._previous_at = now
        return usage
