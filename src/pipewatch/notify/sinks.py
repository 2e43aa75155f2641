"""Notification sinks - Delivery targets for pipeline notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from pipewatch.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pipewatch.api.events import EventManager

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Interface for notification delivery.

    Delivery is fire-and-forget: the caller does not depend on the outcome.
    """

    def send(self, title: str, body: str, link: str | None = None) -> None:
        """Deliver a notification."""
        ...


class LoggingNotificationSink:
    """Writes notifications to the application log."""

    def __init__(self, logger_name: str = "notifications") -> None:
        self._logger = get_logger(logger_name)

    def send(self, title: str, body: str, link: str | None = None) -> None:
        if link:
            self._logger.info("%s: %s (%s)", title, body, link)
        else:
            self._logger.info("%s: %s", title, body)


class EventNotificationSink:
    """Publishes notifications to SSE subscribers."""

    def __init__(self, event_manager: EventManager) -> None:
        self.event_manager = event_manager

    def send(self, title: str, body: str, link: str | None = None) -> None:
        self.event_manager.emit_notification(title=title, body=body, link=link)


class CompositeNotificationSink:
    """Fans a notification out to several sinks.

    A failing sink is logged and does not prevent delivery to the others.
    """

    def __init__(self, sinks: Iterable[NotificationSink]) -> None:
        self.sinks = list(sinks)

    def send(self, title: str, body: str, link: str | None = None) -> None:
        for sink in self.sinks:
            try:
                sink.send(title, body, link)
            except Exception as e:
                logger.warning("Notification sink %s failed: %s", type(sink).__name__, e)
