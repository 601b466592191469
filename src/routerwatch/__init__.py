"""routerwatch: live hotspot and bandwidth telemetry for RouterOS routers."""

from __future__ import annotations

__version__ = "0.3.0"
