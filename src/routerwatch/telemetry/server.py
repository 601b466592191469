"""Async WebSocket server streaming snapshot envelopes to subscribers.

Each connection registers a :class:`Subscriber` with the hub and gets its
own writer task, so one slow client never delays the others.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

import websockets.asyncio.server as ws_server

if TYPE_CHECKING:
    from routerwatch.telemetry.hub import BroadcastHub, Subscriber

logger = logging.getLogger(__name__)


class StreamServer:
    """WebSocket endpoint for the ``bandwidth_update`` stream."""

    def __init__(self, hub: BroadcastHub, *, host: str = "0.0.0.0", port: int = 9090) -> None:
        self._hub = hub
        self._host = host
        self._port = port
        self._server: ws_server.Server | None = None
        self._connection_count = 0
        self._sent_count = 0

    @property
    def port(self) -> int:
        return self._port

    async def start(self) -> None:
        """Start listening on ``{host}:{port}``."""
        self._server = await ws_server.serve(self._handler, host=self._host, port=self._port)
        if self._port == 0:
            # Ephemeral port: report the one the OS picked.
            self._port = next(iter(self._server.sockets)).getsockname()[1]
        logger.info("Stream WebSocket server listening on %s:%d", self._host, self._port)

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info("Stream WebSocket server stopped")

    async def _handler(self, websocket: Any) -> None:
        """Serve one subscriber until either side closes the connection."""
        self._connection_count += 1
        remote = getattr(websocket, "remote_address", ("unknown", 0))
        subscriber = self._hub.subscribe(remote=f"{remote[0]}:{remote[1]}")
        writer = asyncio.create_task(self._pump(subscriber, websocket))

        try:
            async for message in websocket:
                # Subscribers have nothing to say; log for diagnostics only.
                text = message if isinstance(message, str) else repr(message)
                logger.debug("Message from subscriber %d: %s", subscriber.handle, text[:200])
        except Exception:
            logger.debug("Connection closed: %s", remote, exc_info=True)
        finally:
            self._hub.unsubscribe(subscriber)
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
            self._connection_count -= 1

    async def _pump(self, subscriber: Subscriber, websocket: Any) -> None:
        """Drain *subscriber*'s queue into the socket."""
        async for message in subscriber:
            try:
                await websocket.send(message)
            except Exception:
                logger.debug("Send to subscriber %d failed", subscriber.handle, exc_info=True)
                subscriber.close()
                return
            self._sent_count += 1

    @property
    def connection_count(self) -> int:
        """Number of currently open WebSocket connections."""
        return self._connection_count

    @property
    def sent_count(self) -> int:
        """Total envelopes written to sockets since server start."""
        return self._sent_count
