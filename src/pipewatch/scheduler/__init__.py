"""Scheduler - Timer-driven and manual poll cycles."""

from pipewatch.scheduler.models import SchedulerState, SchedulerStatus
from pipewatch.scheduler.scheduler import PollScheduler

__all__ = [
    "PollScheduler",
    "SchedulerState",
    "SchedulerStatus",
]
