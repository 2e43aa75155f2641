"""TransitionDetector - Decides which status changes are worth a notification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pipewatch.gitlab.models import PipelineStatus
from pipewatch.monitor.models import Notification

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pipewatch.monitor.models import TrackedPipeline

logger = logging.getLogger(__name__)


def is_notifiable(previous: PipelineStatus | None, current: PipelineStatus) -> bool:
    """Whether moving from `previous` to `current` can produce a notification.

    A first sighting (no previous status) only establishes a baseline.
    """
    if previous is None or previous == current:
        return False
    return current.is_terminal or current == PipelineStatus.MANUAL


def build_notification(
    tracked: TrackedPipeline,
    status: PipelineStatus,
    notify_on_success: bool = True,
    notify_on_failure: bool = True,
) -> Notification | None:
    """Build the notification for a transition into `status`, if any."""
    pipeline = tracked.pipeline

    if status == PipelineStatus.SUCCESS and notify_on_success:
        body = f"Pipeline #{pipeline.id} passed on {pipeline.ref}"
    elif status == PipelineStatus.FAILED and notify_on_failure:
        body = f"Pipeline #{pipeline.id} failed on {pipeline.ref}"
    elif status == PipelineStatus.CANCELED:
        body = f"Pipeline #{pipeline.id} was canceled on {pipeline.ref}"
    elif status == PipelineStatus.MANUAL:
        body = f"Pipeline on {pipeline.ref} is waiting for a manual action"
    else:
        return None

    return Notification(
        title=tracked.project_name,
        body=body,
        link=pipeline.web_url or None,
        pipeline_id=pipeline.id,
        status=status,
    )


class TransitionDetector:
    """Compares pipeline statuses across cycles.

    Holds the last status seen for each pipeline ID. The memory lives as long
    as the detector; pipelines that drop out of a cycle are forgotten.
    """

    def __init__(self) -> None:
        self._known: dict[int, PipelineStatus] = {}

    def __len__(self) -> int:
        return len(self._known)

    def known_status(self, pipeline_id: int) -> PipelineStatus | None:
        return self._known.get(pipeline_id)

    def reset(self) -> None:
        """Forget every baseline."""
        self._known.clear()

    def detect(
        self,
        tracked: Sequence[TrackedPipeline],
        notify_on_success: bool = True,
        notify_on_failure: bool = True,
    ) -> list[Notification]:
        """Diff the raw statuses of `tracked` against the previous cycle.

        Args:
            tracked: Enriched pipelines of the current cycle, newest first.
            notify_on_success: Whether transitions into success notify.
            notify_on_failure: Whether transitions into failed notify.

        Returns:
            Notifications for the transitions that warrant one.
        """
        notifications: list[Notification] = []

        for item in tracked:
            current = item.pipeline.status
            previous = self._known.get(item.id)

            if is_notifiable(previous, current):
                logger.info(
                    "Pipeline #%d on %s: %s -> %s",
                    item.id,
                    item.ref,
                    previous.value if previous else None,
                    current.value,
                )
                notification = build_notification(
                    item, current, notify_on_success, notify_on_failure
                )
                if notification is not None:
                    notifications.append(notification)

            self._known[item.id] = current

        active_ids = {item.id for item in tracked}
        stale = [pid for pid in self._known if pid not in active_ids]
        for pid in stale:
            del self._known[pid]
        if stale:
            logger.debug("Pruned %d pipeline(s) from status memory", len(stale))

        return notifications
