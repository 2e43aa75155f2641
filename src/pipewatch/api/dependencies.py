"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends

from pipewatch.scheduler import PollScheduler

if TYPE_CHECKING:
    from pipewatch.api.events import EventManager

# Global PollScheduler instance (initialized on app startup)
_scheduler: PollScheduler | None = None


def init_scheduler(scheduler: PollScheduler) -> None:
    """Initialize the global PollScheduler instance."""
    global _scheduler  # noqa: PLW0603
    _scheduler = scheduler


def close_scheduler() -> None:
    """Drop the global PollScheduler instance."""
    global _scheduler  # noqa: PLW0603
    _scheduler = None


def get_scheduler() -> Generator[PollScheduler, None, None]:
    """Dependency that provides the PollScheduler instance."""
    if _scheduler is None:
        raise RuntimeError("PollScheduler not initialized. Call init_scheduler() first.")
    yield _scheduler


# Type alias for dependency injection
SchedulerDep = Annotated[PollScheduler, Depends(get_scheduler)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    from pipewatch.api.events import EventManager as EM  # noqa: PLC0415

    global _event_manager  # noqa: PLW0603
    _event_manager = EM()
    return _event_manager


def close_event_manager() -> None:
    """Drop the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = None


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager
