"""Event primitives shared across lnrelay.

Example:
    >>> from lnrelay.core.events import EventBroadcaster
    >>> broadcaster = EventBroadcaster()
    >>> listener = broadcaster.subscribe("invoicePaid")
"""

from __future__ import annotations

__all__ = [
    "BaseEvent",
    "EventPublisher",
    "EventBroadcaster",
    "ListenerHandle",
    "DEFAULT_LISTENER_QUEUE_SIZE",
]

from .base import BaseEvent, EventPublisher
from .broadcaster import DEFAULT_LISTENER_QUEUE_SIZE, EventBroadcaster, ListenerHandle
