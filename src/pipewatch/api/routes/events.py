"""Server-Sent Events (SSE) endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from pipewatch.api.dependencies import get_event_manager
from pipewatch.api.events import EventType

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from pipewatch.api.events import EventManager, Subscriber

EventManagerDep = Annotated["EventManager", Depends(get_event_manager)]

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def sse_lines(
    event_manager: EventManager, subscriber: Subscriber
) -> AsyncGenerator[str, None]:
    """Yield a subscriber's events as SSE text, with a heartbeat when idle.

    The subscription is removed when the consumer goes away.
    """
    try:
        while True:
            try:
                event = await asyncio.wait_for(
                    subscriber.queue.get(), timeout=event_manager.heartbeat_interval
                )
            except TimeoutError:
                event = event_manager.create_heartbeat_event()
            yield event.to_sse()
    finally:
        event_manager.unsubscribe(subscriber.id)


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    types: list[EventType] | None = Query(default=None, description="Event types to receive"),
) -> StreamingResponse:
    """Subscribe to the event stream.

    Notifications and poll results are pushed as they happen; a heartbeat is
    sent whenever the stream has been quiet for the heartbeat interval.
    """
    subscriber = event_manager.subscribe(frozenset(types) if types else None)
    return StreamingResponse(
        sse_lines(event_manager, subscriber),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
