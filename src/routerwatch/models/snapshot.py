"""Normalized, immutable domain entities published to subscribers.

All models are frozen and serialize with camelCase keys::

    snapshot.model_dump(mode="json", by_alias=True)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
)
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class InterfaceStat(BaseModel):
    model_config = _FROZEN

    name: str
    rx_bits_per_second: int = 0
    tx_bits_per_second: int = 0

    @computed_field(alias="interface")  # type: ignore[prop-decorator]
    @property
    def interface(self) -> str:
        return self.name

    @computed_field(alias="rxKbps")  # type: ignore[prop-decorator]
    @property
    def rx_kbps(self) -> float:
        return self.rx_bits_per_second / 1000

    @computed_field(alias="txKbps")  # type: ignore[prop-decorator]
    @property
    def tx_kbps(self) -> float:
        return self.tx_bits_per_second / 1000


class UsageSample(BaseModel):
    """Per-IP throughput in bytes per second since the previous poll."""

    model_config = _FROZEN

    rx: float = 0.0
    tx: float = 0.0


def _read_only(value: Mapping[str, UsageSample]) -> Mapping[str, UsageSample]:
    return MappingProxyType(dict(value))


UsageByIP = Annotated[Mapping[str, UsageSample], AfterValidator(_read_only)]


class UserView(BaseModel):
    """A hotspot user joined with its active sessions (counted, not expanded)."""

    model_config = _FROZEN

    username: str
    profile: str = ""
    uptime_seconds: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    disabled: bool = False
    comment: str = ""
    limit_bytes_in: int = 0
    limit_bytes_out: int = 0
    is_online: bool = False
    active_session_count: int = 0
    address: str | None = None


class SessionDetail(BaseModel):
    model_config = _FROZEN

    ip_address: str | None = None
    mac_address: str | None = None
    login_time: datetime | None = None
    uptime_seconds: int = 0
    session_id: str | None = None
    bytes_in: int = 0
    bytes_out: int = 0


class HistoryEntry(BaseModel):
    model_config = _FROZEN

    ip_address: str | None = None
    mac_address: str | None = None
    last_seen: str | None = None
    status: str = "unknown"
    host: str | None = None
    bytes_in: int = 0
    bytes_out: int = 0


class UserDetail(UserView):
    """Full per-user view: every matching session and history entry."""

    sessions: tuple[SessionDetail, ...] = ()
    history: tuple[HistoryEntry, ...] = ()


class LogEntry(BaseModel):
    model_config = _FROZEN

    id: str | None = None
    time: str | None = None
    topics: tuple[str, ...] = ()
    message: str = ""


class TelemetrySnapshot(BaseModel):
    """One point-in-time aggregation of every polled source.

    Never mutated after publication; each poll cycle builds a new instance
    with a strictly larger ``sequence_number``.
    """

    model_config = _FROZEN

    interfaces: tuple[InterfaceStat, ...] = ()
    active_ips: frozenset[str] = Field(default=frozenset(), alias="activeIPs")
    usage_by_ip: UsageByIP = Field(
        default_factory=lambda: MappingProxyType({}), alias="usageByIP"
    )
    users: tuple[UserView, ...] = ()
    taken_at: datetime
    sequence_number: int

    @field_serializer("active_ips")
    def _serialize_active_ips(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    @field_serializer("usage_by_ip")
    def _serialize_usage(self, value: Mapping[str, UsageSample]) -> dict[str, UsageSample]:
        return dict(value)

    def find_user(self, username: str) -> UserView | None:
        """Return the correlated view for *username*, or ``None``."""
        for user in self.users:
            if user.username == username:
                return user
        return None
