"""Broadcast hub: fans each snapshot out to every live subscriber.

Publishing never waits on a subscriber.  Each subscriber owns a bounded
queue; when it is full the oldest queued message is dropped.  A writer task
(see :class:`~routerwatch.telemetry.server.StreamServer`) drains the queue
and closes the subscriber when its connection fails, after which the next
publish prunes it.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from routerwatch.models.snapshot import TelemetrySnapshot

logger = logging.getLogger(__name__)

ENVELOPE_TYPE = "bandwidth_update"
DEFAULT_QUEUE_SIZE = 8


class Subscriber:
    """Handle for one live subscriber; iterate it to receive messages."""

    def __init__(
        self, handle: int, *, maxsize: int = DEFAULT_QUEUE_SIZE, remote: str = ""
    ) -> None:
        self.handle = handle
        self.remote = remote
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max(1, maxsize))
        self._closed = False
        self._dropped = 0

    def __repr__(self) -> str:
        return f"Subscriber(handle={self.handle}, remote={self.remote!r})"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> int:
        """Messages discarded because the queue was full."""
        return self._dropped

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, message: str) -> bool:
        """Queue *message* without blocking.  Returns ``False`` if closed."""
        if self._closed:
            return False
        self._put_dropping_oldest(message)
        return True

    def close(self) -> None:
        """Mark closed and wake any pending reader."""
        if self._closed:
            return
        self._closed = True
        self._put_dropping_oldest(None)

    def _put_dropping_oldest(self, item: str | None) -> None:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            with contextlib.suppress(asyncio.QueueEmpty):
                self._queue.get_nowait()
            if item is not None:
                self._dropped += 1
            self._queue.put_nowait(item)

    def get_nowait(self) -> str | None:
        """Return the next queued message, or ``None`` when nothing is queued."""
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def __aiter__(self) -> Subscriber:
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        message = await self._queue.get()
        if message is None or self._closed:
            raise StopAsyncIteration
        return message


def build_envelope(
    snapshot: TelemetrySnapshot, timestamp: datetime | None = None
) -> dict[str, Any]:
    """Wrap *snapshot* in the streaming envelope."""
    ts = timestamp or datetime.now(UTC)
    return {
        "type": ENVELOPE_TYPE,
        "data": snapshot.model_dump(mode="json", by_alias=True),
        "timestamp": ts.isoformat(),
    }


class BroadcastHub:
    """Registry of subscribers keyed by handle, with non-blocking fan-out."""

    def __init__(self, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}
        self._handles = itertools.count(1)
        self._lock = asyncio.Lock()
        self._last_sequence = 0
        self._publish_count = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def last_sequence(self) -> int:
        """Sequence number of the last snapshot actually broadcast."""
        return self._last_sequence

    @property
    def publish_count(self) -> int:
        return self._publish_count

    def subscribe(self, remote: str = "") -> Subscriber:
        subscriber = Subscriber(next(self._handles), maxsize=self._queue_size, remote=remote)
        self._subscribers[subscriber.handle] = subscriber
        logger.info(
            "Subscriber %d connected %s(total: %d)",
            subscriber.handle,
            f"from {remote} " if remote else "",
            len(self._subscribers),
        )
        return subscriber

    def unsubscribe(self, subscriber: Subscriber | int) -> bool:
        """Remove and close a subscriber.  Returns ``True`` if it was registered."""
        handle = subscriber if isinstance(subscriber, int) else subscriber.handle
        removed = self._subscribers.pop(handle, None)
        if removed is None:
            return False
        removed.close()
        logger.info(
            "Subscriber %d disconnected (remaining: %d)", handle, len(self._subscribers)
        )
        return True

    async def publish(self, snapshot: TelemetrySnapshot) -> int:
        """Offer *snapshot* to every open subscriber.

        Snapshots are broadcast one at a time in increasing sequence order;
        a snapshot not newer than the last broadcast one is ignored.
        Returns the number of subscribers the envelope was queued for.
        """
        async with self._lock:
            if snapshot.sequence_number <= self._last_sequence:
                logger.debug(
                    "Ignoring stale snapshot #%d (last broadcast #%d)",
                    snapshot.sequence_number,
                    self._last_sequence,
                )
                return 0
            self._last_sequence = snapshot.sequence_number
            self._publish_count += 1

            message = json.dumps(build_envelope(snapshot))
            delivered = 0
            for handle, subscriber in list(self._subscribers.items()):
                if subscriber.closed:
                    del self._subscribers[handle]
                    logger.debug("Pruned closed subscriber %d", handle)
                    continue
                subscriber.offer(message)
                delivered += 1
            return delivered
