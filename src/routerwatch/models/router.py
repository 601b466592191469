"""Raw RouterOS records as returned by the REST API.

Every value arrives as a string; numeric and boolean coercion happens in
:mod:`routerwatch.telemetry.normalize`.  Unknown keys are preserved.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

_RECORD = ConfigDict(extra="allow", populate_by_name=True)


class IpAddress(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    address: str | None = None
    network: str | None = None
    interface: str | None = None
    disabled: str | None = None


class DhcpLease(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    address: str | None = None
    active_address: str | None = Field(default=None, alias="active-address")
    mac_address: str | None = Field(default=None, alias="mac-address")
    host_name: str | None = Field(default=None, alias="host-name")
    status: str | None = None


class Interface(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    name: str
    type: str | None = None
    running: str | None = None
    disabled: str | None = None


class TrafficSample(BaseModel):
    model_config = _RECORD

    name: str | None = None
    rx_bits_per_second: str | None = Field(default=None, alias="rx-bits-per-second")
    tx_bits_per_second: str | None = Field(default=None, alias="tx-bits-per-second")


class HotspotUser(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    name: str
    profile: str | None = None
    uptime: str | None = None
    bytes_in: str | None = Field(default=None, alias="bytes-in")
    bytes_out: str | None = Field(default=None, alias="bytes-out")
    disabled: str | bool | None = None
    comment: str | None = None
    limit_bytes_in: str | None = Field(default=None, alias="limit-bytes-in")
    limit_bytes_out: str | None = Field(default=None, alias="limit-bytes-out")
    mac_address: str | None = Field(default=None, alias="mac-address")


class ActiveSession(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    user: str | None = None
    address: str | None = None
    mac_address: str | None = Field(default=None, alias="mac-address")
    uptime: str | None = None
    bytes_in: str | None = Field(default=None, alias="bytes-in")
    bytes_out: str | None = Field(default=None, alias="bytes-out")
    login_by: str | None = Field(default=None, alias="login-by")


class HotspotHost(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    address: str | None = None
    mac_address: str | None = Field(default=None, alias="mac-address")
    to_address: str | None = Field(default=None, alias="to-address")
    host_name: str | None = Field(default=None, alias="host-name")
    last_seen: str | None = Field(default=None, alias="last-seen")
    idle_time: str | None = Field(default=None, alias="idle-time")
    authorized: str | bool | None = None
    bypassed: str | bool | None = None
    bytes_in: str | None = Field(default=None, alias="bytes-in")
    bytes_out: str | None = Field(default=None, alias="bytes-out")


class LogRecord(BaseModel):
    model_config = _RECORD

    id: str | None = Field(default=None, alias=".id")
    time: str | None = None
    topics: str | None = None
    message: str = ""
