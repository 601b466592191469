"""JSON envelopes printed by the CLI when output is piped or ``--format json``.

Every command prints exactly one object::

    {"ok": true, "command": "users", "data": [...], "timestamp": "..."}
    {"ok": false, "command": "user", "error": {"code": "not_found", ...}, "timestamp": "..."}

Model payloads are dumped with the same camelCase aliases the REST API uses,
so ``routerwatch users | jq .data`` matches ``GET /api/users``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel


def to_jsonable(value: Any) -> Any:
    """Recursively convert models and containers to plain JSON values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def success_envelope(
    command: str, data: Any, *, now: datetime | None = None
) -> dict[str, Any]:
    return {
        "ok": True,
        "command": command,
        "data": to_jsonable(data),
        "timestamp": (now or datetime.now(UTC)).isoformat(),
    }


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    hint: str = "",
    now: datetime | None = None,
) -> dict[str, Any]:
    """Envelope for a failed command; ``hint`` is included only when set."""
    error: dict[str, Any] = {"code": code, "message": message}
    if hint:
        error["hint"] = hint
    return {
        "ok": False,
        "command": command,
        "error": error,
        "timestamp": (now or datetime.now(UTC)).isoformat(),
    }


def dumps(envelope: Mapping[str, Any]) -> str:
    return json.dumps(envelope, indent=2, default=str)
