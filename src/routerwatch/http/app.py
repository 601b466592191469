"""REST surface (Starlette).

Routes::

    GET    /api/network-data
    GET    /api/users
    GET    /api/users/{username}
    POST   /api/users/{username}/toggle
    DELETE /api/users/{username}
    GET    /api/logs/all
    GET    /health

Every route answers JSON.  A missing target maps to 404 and any other
failure to 500, both with an ``{"error": ...}`` body.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from routerwatch import __version__
from routerwatch.api.errors import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request

    from routerwatch.telemetry.setup import MonitorSession

logger = logging.getLogger(__name__)


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", by_alias=True)


def _json_errors(failure: str) -> Callable[..., Any]:
    """Map exceptions raised by an endpoint to JSON error responses."""

    def decorator(
        endpoint: Callable[[Request], Awaitable[JSONResponse]],
    ) -> Callable[[Request], Awaitable[JSONResponse]]:
        @functools.wraps(endpoint)
        async def wrapper(request: Request) -> JSONResponse:
            try:
                return await endpoint(request)
            except NotFoundError as exc:
                return JSONResponse({"error": str(exc)}, status_code=404)
            except Exception:
                logger.error("%s %s failed", request.method, request.url.path, exc_info=True)
                return JSONResponse({"error": failure}, status_code=500)

        return wrapper

    return decorator


def create_app(session: MonitorSession) -> Starlette:
    """Build the ASGI app serving *session*."""
    queries = session.queries
    commands = session.commands

    @_json_errors("Failed to fetch network data")
    async def network_data(request: Request) -> JSONResponse:
        return JSONResponse(_dump(await queries.network_data()))

    @_json_errors("Failed to fetch user data")
    async def list_users(request: Request) -> JSONResponse:
        return JSONResponse([_dump(u) for u in await queries.list_users()])

    @_json_errors("Failed to fetch user data")
    async def user_detail(request: Request) -> JSONResponse:
        username = request.path_params["username"]
        detail = await queries.get_user_detail(username)
        if detail is None:
            raise NotFoundError("User", username)
        return JSONResponse(_dump(detail))

    @_json_errors("Failed to toggle user")
    async def toggle_user(request: Request) -> JSONResponse:
        username = request.path_params["username"]
        disabled = await commands.toggle_user_disabled(username)
        return JSONResponse(
            {
                "success": True,
                "username": username,
                "disabled": disabled,
                "consistency": "eventual",
            }
        )

    @_json_errors("Failed to delete user")
    async def delete_user(request: Request) -> JSONResponse:
        username = request.path_params["username"]
        await commands.delete_user(username)
        return JSONResponse({"success": True, "username": username, "consistency": "eventual"})

    @_json_errors("Failed to fetch logs")
    async def all_logs(request: Request) -> JSONResponse:
        return JSONResponse([_dump(entry) for entry in await queries.logs()])

    async def health(request: Request) -> JSONResponse:
        latest = session.aggregator.latest
        return JSONResponse(
            {
                "status": "ok",
                "version": __version__,
                "connected": session.source.is_connected,
                "sequenceNumber": latest.sequence_number if latest else None,
                "takenAt": latest.taken_at.isoformat() if latest else None,
                "degradedSections": list(session.aggregator.last_failures),
                "subscribers": session.hub.subscriber_count,
                "cycles": session.scheduler.cycle_count,
                "missedCycles": session.scheduler.missed_count,
            }
        )

    routes = [
        Route("/api/network-data", network_data, methods=["GET"]),
        Route("/api/users", list_users, methods=["GET"]),
        Route("/api/users/{username}", user_detail, methods=["GET"]),
        Route("/api/users/{username}", delete_user, methods=["DELETE"]),
        Route("/api/users/{username}/toggle", toggle_user, methods=["POST"]),
        Route("/api/logs/all", all_logs, methods=["GET"]),
        Route("/health", health, methods=["GET"]),
    ]
    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
            ),
        ],
    )
    app.state.session = session
    return app
