"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class EventType(str, Enum):
    """Types of events that can be emitted."""

    NOTIFICATION = "notification"
    POLL_COMPLETED = "poll_completed"
    HEARTBEAT = "heartbeat"


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    event_types: frozenset[EventType] | None = None  # None means all event types

    @classmethod
    def create(cls, event_types: frozenset[EventType] | None = None) -> Subscriber:
        """Create a new subscriber."""
        return cls(id=str(uuid4()), queue=asyncio.Queue(), event_types=event_types)

    def accepts(self, event: Event) -> bool:
        return self.event_types is None or event.event_type in self.event_types


@dataclass
class EventManager:
    """Manager for SSE events."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    heartbeat_interval: float = 30.0

    def subscribe(self, event_types: frozenset[EventType] | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            event_types: Optional set of event types to receive. None means all.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(event_types)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events.

        Args:
            subscriber_id: ID of the subscriber to remove.
        """
        self._subscribers.pop(subscriber_id, None)

    async def emit(self, event: Event) -> None:
        """Emit an event to all matching subscribers.

        Args:
            event: Event to emit.
        """
        for subscriber in self._subscribers.values():
            if subscriber.accepts(event):
                await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event synchronously (for use in non-async contexts).

        Args:
            event: Event to emit.
        """
        for subscriber in self._subscribers.values():
            if subscriber.accepts(event):
                subscriber.queue.put_nowait(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_notification(self, title: str, body: str, link: str | None = None) -> None:
        """Emit a notification event."""
        event = Event(
            event_type=EventType.NOTIFICATION,
            data={
                "title": title,
                "body": body,
                "link": link,
                "timestamp": _timestamp(),
            },
        )
        self.emit_sync(event)

    def emit_poll_completed(
        self,
        connected: bool,
        pipeline_count: int,
        error: str | None = None,
    ) -> None:
        """Emit a poll_completed event."""
        event = Event(
            event_type=EventType.POLL_COMPLETED,
            data={
                "connected": connected,
                "pipeline_count": pipeline_count,
                "error": error,
                "timestamp": _timestamp(),
            },
        )
        self.emit_sync(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            data={"timestamp": _timestamp()},
        )
