"""Async REST client for the router, the single shared telemetry source.

Every console command is sent as ``POST /rest<path>``.  ``.../print`` commands
turn their filters into ``.query`` expressions; other commands (for example
``/interface/monitor-traffic``) receive the filters as arguments.

Connection handling is lazy: the first request (or an explicit
:meth:`RouterClient.connect`) opens the session, and a failed attempt is
simply retried on the next call.  Concurrent callers share one in-flight
connect attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from routerwatch.api.errors import ConnectError, MutateError, QueryError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from routerwatch.models.config import AppSettings

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class TelemetrySource(Protocol):
    """Request/response access to the device.  Stateful: requires a connect."""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def query(
        self, command: str, filters: Mapping[str, str] | None = None
    ) -> list[Record]: ...

    async def mutate(self, command: str, fields: Mapping[str, str]) -> None: ...

    async def close(self) -> None: ...


def _as_records(data: Any) -> list[Record]:
    """Normalize a REST response body to a list of flat records."""
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if isinstance(data, dict):
        return [data]
    return []


def _error_detail(response: httpx.Response) -> str:
    """Extract the router's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if detail:
            return str(detail)
    return response.reason_phrase


class RouterClient:
    """Shared, lazily-connected HTTP session to the router's REST API.

    Parameters:
        base_url: REST root, e.g. ``http://192.168.88.1/rest``.
        username / password: HTTP basic-auth credentials.
        verify: Verify the router's TLS certificate.
        timeout: Per-request timeout in seconds.
        max_concurrency: Upper bound on requests in flight at once.
        transport: Optional httpx transport (tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str,
        password: str,
        verify: bool = True,
        timeout: float = 5.0,
        max_concurrency: int = 4,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._auth = httpx.BasicAuth(username, password)
        self._verify = verify
        self._timeout = timeout
        self._transport = transport
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._client: httpx.AsyncClient | None = None
        self._connected = False
        self._connect_task: asyncio.Task[None] | None = None
        self._identity: str | None = None
        self._request_count = 0

    @classmethod
    def from_settings(cls, settings: AppSettings) -> RouterClient:
        return cls(
            settings.base_url,
            username=settings.router_user,
            password=settings.router_password,
            verify=settings.router_verify_tls,
            timeout=settings.query_timeout,
            max_concurrency=settings.max_concurrency,
        )

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def identity(self) -> str | None:
        """Router identity reported during the last successful connect."""
        return self._identity

    @property
    def request_count(self) -> int:
        return self._request_count

    async def connect(self) -> None:
        """Open the session if needed.

        No-op when already connected.  A caller arriving while another
        attempt is in flight waits for that attempt and shares its outcome.
        Raises :class:`ConnectError` on failure.
        """
        if self._connected:
            return
        task = self._connect_task
        if task is None or task.done():
            task = asyncio.create_task(self._open())
            self._connect_task = task
        try:
            await asyncio.shield(task)
        finally:
            if task.done() and self._connect_task is task:
                self._connect_task = None

    async def _open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=self._auth,
                verify=self._verify,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        logger.info("Connecting to router at %s", self._base_url)
        try:
            response = await self._client.get("/system/identity")
        except httpx.HTTPError as exc:
            logger.error("Router connection to %s failed: %s", self._base_url, exc)
            raise ConnectError(f"Cannot reach router at {self._base_url}: {exc}") from exc

        if response.status_code in (401, 403):
            logger.error("Router rejected credentials (%d)", response.status_code)
            raise ConnectError(
                "Router rejected the configured credentials",
                status_code=response.status_code,
            )
        if response.is_error:
            detail = _error_detail(response)
            logger.error("Router connection failed: %s", detail)
            raise ConnectError(
                f"Router connection failed: {detail}", status_code=response.status_code
            )

        records = _as_records(response.json() if response.content else None)
        self._identity = records[0].get("name") if records else None
        self._connected = True
        logger.info("Connected to router %s", self._identity or self._base_url)

    async def query(
        self, command: str, filters: Mapping[str, str] | None = None
    ) -> list[Record]:
        """Run a read command and return its records.

        Raises :class:`QueryError` (or :class:`ConnectError` when the session
        cannot be opened).
        """
        body: dict[str, Any] = {}
        if command.endswith("/print"):
            if filters:
                body[".query"] = [f"{key}={value}" for key, value in filters.items()]
        elif filters:
            body.update(filters)
        data = await self._post(command, body, error_cls=QueryError)
        return _as_records(data)

    async def mutate(self, command: str, fields: Mapping[str, str]) -> None:
        """Run a write command.  Raises :class:`MutateError` on rejection."""
        await self._post(command, dict(fields), error_cls=MutateError)

    async def _post(
        self,
        command: str,
        body: dict[str, Any],
        *,
        error_cls: type[QueryError] | type[MutateError],
    ) -> Any:
        await self.connect()
        assert self._client is not None

        async with self._semaphore:
            self._request_count += 1
            try:
                response = await self._client.post(command, json=body)
            except httpx.HTTPError as exc:
                if isinstance(exc, httpx.NetworkError):
                    # Connection dropped: reopen lazily on the next call.
                    self._connected = False
                raise error_cls(f"{command} failed: {exc}", command=command) from exc

        if response.status_code == 401:
            self._connected = False
            raise ConnectError("Router session is no longer authorized", status_code=401)
        if response.is_error:
            raise error_cls(
                f"{command} rejected: {_error_detail(response)}",
                command=command,
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise error_cls(f"{command} returned invalid JSON", command=command) from exc

    async def close(self) -> None:
        """Close the HTTP session."""
        self._connected = False
        if self._client is not None:
            await self._client.aclose()
            self._client = None
