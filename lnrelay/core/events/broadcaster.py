"""Topic based fan-out of events to independent listeners.

The broadcaster decouples a single upstream publisher from any number of
downstream listeners. Each listener owns a bounded buffer, so a slow
consumer only ever loses its own oldest events and never stalls the
publisher or its siblings.

Example:
    >>> broadcaster = EventBroadcaster()
    >>> async with broadcaster.listen("invoicePaid") as listener:
    ...     async for event in listener:
    ...         print(event.payment_hash)
"""

from __future__ import annotations

import asyncio
import threading
from collections import defaultdict, deque
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID, uuid4

from lnrelay.utils.logging import get_logger

from .base import BaseEvent

logger = get_logger(__name__)

DEFAULT_LISTENER_QUEUE_SIZE = 1000


class ListenerHandle:
    """One consumer's subscription to a topic.

    Iterate it with ``async for`` to receive events in publish order. The
    iteration ends once the handle is unsubscribed.

    Attributes:
        topic: Topic the listener is attached to
        listener_id: Unique identifier of this subscription
        received: Events accepted into the buffer
        dropped: Events discarded because the buffer was full
    """

    def __init__(
        self,
        topic: str,
        max_queue_size: int,
        detach: Callable[[ListenerHandle], None],
    ) -> None:
        if max_queue_size < 1:
            raise ValueError("max_queue_size must be >= 1")

        self.topic = topic
        self.listener_id: UUID = uuid4()
        self.received = 0
        self.dropped = 0
        self._buffer: deque[BaseEvent] = deque(maxlen=max_queue_size)
        self._ready = asyncio.Event()
        self._closed = False
        self._detach = detach

    @property
    def closed(self) -> bool:
        """True once the listener has been detached."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of buffered events not yet consumed."""
        return len(self._buffer)

    def close(self) -> None:
        """Detach this listener from its broadcaster. Idempotent."""
        self._detach(self)

    def _deliver(self, event: BaseEvent) -> bool:
        if self._closed:
            return False

        if len(self._buffer) == self._buffer.maxlen:
            # deque(maxlen) evicts the oldest entry on append
            self.dropped += 1
            logger.warning(
                "listener_overflow",
                topic=self.topic,
                listener_id=str(self.listener_id),
                dropped=self.dropped,
            )

        self._buffer.append(event)
        self.received += 1
        self._ready.set()
        return True

    def _shutdown(self) -> None:
        self._closed = True
        self._buffer.clear()
        self._ready.set()

    def __aiter__(self) -> ListenerHandle:
        return self

    async def __anext__(self) -> BaseEvent:
        while True:
            if self._closed:
                raise StopAsyncIteration
            if self._buffer:
                return self._buffer.popleft()
            self._ready.clear()
            await self._ready.wait()

    def __repr__(self) -> str:
        return (
            f"<ListenerHandle(topic={self.topic!r}, listener_id={self.listener_id}, "
            f"pending={self.pending}, closed={self._closed})>"
        )


class EventBroadcaster:
    """Concurrency-safe publish/subscribe hub keyed by topic.

    Features:
    - Any number of listeners per topic, attached and detached at any time
    - Each listener sees every event published after it attached, in order
    - Non-blocking publish: delivery is a bounded, per-listener buffer append
    - Drop-oldest overflow policy per listener
    - No persistence, no replay, no deduplication

    The listener registry is guarded by a lock held only while attaching,
    detaching or taking the snapshot a publish iterates over.
    """

    def __init__(self, max_queue_size: int = DEFAULT_LISTENER_QUEUE_SIZE) -> None:
        if max_queue_size < 1:
            raise ValueError("max_queue_size must be >= 1")

        self.max_queue_size = max_queue_size
        self._listeners: dict[str, dict[UUID, ListenerHandle]] = defaultdict(dict)
        self._lock = threading.Lock()
        self._published: dict[str, int] = defaultdict(int)

    def subscribe(self, topic: str, max_queue_size: int | None = None) -> ListenerHandle:
        """Attach a new listener to ``topic``.

        Args:
            topic: Topic name
            max_queue_size: Per-listener buffer size (broadcaster default if None)

        Returns:
            Handle yielding the events published from now on
        """
        handle = ListenerHandle(
            topic,
            self.max_queue_size if max_queue_size is None else max_queue_size,
            detach=self.unsubscribe,
        )

        with self._lock:
            self._listeners[topic][handle.listener_id] = handle
            count = len(self._listeners[topic])

        logger.debug(
            "listener_attached",
            topic=topic,
            listener_id=str(handle.listener_id),
            listeners=count,
        )
        return handle

    def unsubscribe(self, handle: ListenerHandle) -> None:
        """Detach ``handle``. Safe to call repeatedly and during a publish.

        Once this returns the handle yields no further events.
        """
        with self._lock:
            listeners = self._listeners.get(handle.topic)
            removed = listeners.pop(handle.listener_id, None) if listeners is not None else None
            if listeners is not None and not listeners:
                del self._listeners[handle.topic]
            handle._shutdown()

        if removed is not None:
            logger.debug(
                "listener_detached",
                topic=handle.topic,
                listener_id=str(handle.listener_id),
                received=handle.received,
                dropped=handle.dropped,
            )

    def publish(self, topic: str, event: BaseEvent) -> int:
        """Hand ``event`` to every listener attached to ``topic`` right now.

        Never waits on a consumer.

        Returns:
            Number of listeners that accepted the event
        """
        with self._lock:
            snapshot = list(self._listeners.get(topic, {}).values())
            self._published[topic] += 1

        delivered = 0
        for handle in snapshot:
            if handle._deliver(event):
                delivered += 1

        logger.debug(
            "event_broadcast",
            topic=topic,
            event_type=type(event).__name__,
            event_id=str(event.event_id),
            listeners=delivered,
        )
        return delivered

    @asynccontextmanager
    async def listen(
        self, topic: str, max_queue_size: int | None = None
    ) -> AsyncIterator[ListenerHandle]:
        """Subscribe for the duration of an ``async with`` block."""
        handle = self.subscribe(topic, max_queue_size)
        try:
            yield handle
        finally:
            self.unsubscribe(handle)

    def listener_count(self, topic: str) -> int:
        """Number of listeners currently attached to ``topic``."""
        with self._lock:
            return len(self._listeners.get(topic, {}))

    def topics(self) -> list[str]:
        """Topics with at least one attached listener."""
        with self._lock:
            return list(self._listeners)

    def get_stats(self) -> dict[str, Any]:
        """Get broadcaster statistics.

        Returns:
            Dictionary with listener counts per topic and publish counts
        """
        with self._lock:
            listeners = {topic: len(handles) for topic, handles in self._listeners.items()}
            published = dict(self._published)

        return {
            "listeners": listeners,
            "total_listeners": sum(listeners.values()),
            "events_published": published,
            "total_events": sum(published.values()),
        }
