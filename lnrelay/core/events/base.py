"""Base event types.

Provides the immutable event base class shared by every event relayed
through the broadcaster, and the publishing contract the subscriber
depends on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID, uuid4


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all domain events.

    All events are immutable (frozen dataclass) and include standard metadata:
    - event_id: Unique identifier for this event instance
    - occurred_at: Timestamp when the event was received (UTC)
    - context: Optional additional context data
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC), init=False)
    context: dict[str, Any] | None = field(default=None, kw_only=True)


class EventPublisher(Protocol):
    """Anything events can be published to by topic."""

    def publish(self, topic: str, event: BaseEvent) -> int:
        """Deliver ``event`` to the listeners of ``topic``.

        Returns:
            Number of listeners the event was handed to
        """
        ...
