"""Data models for the Scheduler module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SchedulerState(StrEnum):
    """Lifecycle state of the poll scheduler."""

    STOPPED = "stopped"
    RUNNING = "running"
    NOT_CONFIGURED = "not_configured"


@dataclass
class SchedulerStatus:
    """Status of the poll scheduler.

    Attributes:
        state: Lifecycle state.
        polling: Whether a cycle is in flight right now.
        interval: Effective polling interval in seconds.
    """

    state: SchedulerState
    polling: bool
    interval: float
