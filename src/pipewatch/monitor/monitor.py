"""PipelineMonitor - Runs poll cycles and owns all cross-cycle state."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pipewatch.gitlab.exceptions import GitLabError
from pipewatch.monitor.enricher import JobEnricher
from pipewatch.monitor.fetcher import PipelineFetcher, recency_cutoff
from pipewatch.monitor.models import CycleResult, MonitorSnapshot
from pipewatch.monitor.reconciler import Reconciler
from pipewatch.monitor.transitions import TransitionDetector

if TYPE_CHECKING:
    from pipewatch.config import MonitorSettings
    from pipewatch.gitlab import GitLabClient, GitLabUser
    from pipewatch.monitor.models import Notification
    from pipewatch.notify import NotificationSink

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Not configured"


class PipelineMonitor:
    """Coordinates one poll cycle at a time.

    A cycle runs these phases strictly in sequence; each fan-out phase is
    fully merged before the next one starts:

    1. Resolve the current user (cached after the first success).
    2. Fetch recent pipelines of every active project.
    3. Reconcile: canonical pipeline per branch, superseded failures.
    4. Enrich every pipeline with its jobs.
    5. Sort newest first, detect transitions, notify.
    6. Publish a new snapshot.

    The status memory, the cached user and the snapshot are only modified
    here, between phases. Consumers read `snapshot`, which is replaced
    atomically at the end of a cycle.
    """

    def __init__(self, notification_sink: NotificationSink) -> None:
        """Initialize the monitor.

        Args:
            notification_sink: Where transition notifications are delivered.
        """
        self.notification_sink = notification_sink
        self._detector = TransitionDetector()
        self._snapshot = MonitorSnapshot()
        self._current_user: GitLabUser | None = None
        self._generation = 0

    @property
    def snapshot(self) -> MonitorSnapshot:
        return self._snapshot

    @property
    def detector(self) -> TransitionDetector:
        return self._detector

    @property
    def generation(self) -> int:
        """Incremented by reset(); cycles started before a reset are discarded."""
        return self._generation

    def reset(self) -> None:
        """Forget the cached user and every status baseline.

        Used when credentials change so that no baseline leaks across accounts.
        The published pipelines stay visible until the next cycle completes.
        """
        self._generation += 1
        self._detector.reset()
        self._current_user = None
        self._snapshot = replace(self._snapshot, current_user=None)
        logger.info("Monitor state reset (generation %d)", self._generation)

    def mark_not_configured(self) -> None:
        self._snapshot = replace(
            self._snapshot,
            is_configured=False,
            is_connected=False,
            last_error=NOT_CONFIGURED_MESSAGE,
        )

    def mark_disconnected(self, message: str) -> None:
        """Flag the snapshot as disconnected, keeping the last pipelines."""
        self._snapshot = replace(
            self._snapshot,
            is_configured=True,
            is_connected=False,
            last_error=message,
        )

    async def poll(self, client: GitLabClient, settings: MonitorSettings) -> CycleResult:
        """Run one full poll cycle.

        Args:
            client: GitLab client for every request of this cycle.
            settings: Settings providing the notification toggles.

        Returns:
            CycleResult describing the outcome.
        """
        generation = self._generation
        now = datetime.now(UTC)
        since = recency_cutoff(now)

        try:
            user = self._current_user
            if user is None:
                user = await client.fetch_current_user()
                logger.info("Logged in as: %s (%s)", user.name, user.username)

            tracked = await PipelineFetcher(client).fetch(user.username, since)
        except GitLabError as e:
            if generation != self._generation:
                return self._discard(generation)
            message = str(e) or type(e).__name__
            logger.error("Poll error: %s", message)
            self.mark_disconnected(message)
            return CycleResult(completed=False, error=message)

        reconciled = await Reconciler(client).reconcile(tracked)
        enriched = await JobEnricher(client).enrich_all(reconciled.tracked)

        if generation != self._generation:
            return self._discard(generation)

        enriched.sort(key=lambda t: t.id, reverse=True)

        notifications = self._detector.detect(
            enriched,
            notify_on_success=settings.notify_on_success,
            notify_on_failure=settings.notify_on_failure,
        )

        self._current_user = user
        self._snapshot = MonitorSnapshot(
            pipelines=tuple(enriched),
            current_user=user,
            is_configured=True,
            is_connected=True,
            last_error=None,
            last_refresh=datetime.now(UTC),
        )

        for notification in notifications:
            self._deliver(notification)

        logger.info(
            "Poll complete: %d pipeline(s), %d notification(s)",
            len(enriched),
            len(notifications),
        )
        return CycleResult(completed=True, notifications=notifications)

    def _discard(self, generation: int) -> CycleResult:
        logger.info(
            "Discarding results of cycle from generation %d (now %d)",
            generation,
            self._generation,
        )
        return CycleResult(completed=False, error="Cycle superseded by a restart")

    def _deliver(self, notification: Notification) -> None:
        try:
            self.notification_sink.send(notification.title, notification.body, notification.link)
        except Exception as e:
            logger.warning(
                "Failed to deliver notification for pipeline #%d: %s",
                notification.pipeline_id,
                e,
            )
