"""Notification sinks for pipeline status changes."""

from pipewatch.notify.sinks import (
    CompositeNotificationSink,
    EventNotificationSink,
    LoggingNotificationSink,
    NotificationSink,
)

__all__ = [
    "CompositeNotificationSink",
    "EventNotificationSink",
    "LoggingNotificationSink",
    "NotificationSink",
]
