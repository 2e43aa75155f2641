"""Data models for the Monitor module."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from pipewatch.gitlab.models import JobRecord, PipelineRecord, PipelineStatus

if TYPE_CHECKING:
    from pipewatch.gitlab.models import GitLabUser

CanonicalKey = tuple[int, str]


@dataclass(frozen=True)
class TrackedPipeline:
    """A pipeline joined with its project and the job-level details derived for it.

    Attributes:
        pipeline: The raw pipeline record.
        project_name: Display name of the owning project.
        project_id: ID of the owning project.
        current_job: Job that is running/pending right now (active pipelines only).
        failed_job: First failed job (failed pipelines only).
        retry_count: Attempts of the failed job beyond the first.
        manual_jobs: Jobs waiting on a manual action.
    """

    pipeline: PipelineRecord
    project_name: str
    project_id: int
    current_job: JobRecord | None = None
    failed_job: JobRecord | None = None
    retry_count: int = 0
    manual_jobs: tuple[JobRecord, ...] = ()

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError(f"retry_count must be >= 0, got {self.retry_count}")

    @property
    def id(self) -> int:
        return self.pipeline.id

    @property
    def ref(self) -> str:
        return self.pipeline.ref

    @property
    def canonical_key(self) -> CanonicalKey:
        return (self.project_id, self.pipeline.ref)

    @property
    def is_waiting_for_manual(self) -> bool:
        """True when the pipeline has pending manual actions."""
        return bool(self.manual_jobs)

    @property
    def effective_status(self) -> PipelineStatus:
        """Status shown to users.

        GitLab reports "success" once all required jobs passed, even if optional
        manual jobs (e.g. a deploy button) are still waiting.
        """
        if self.pipeline.status == PipelineStatus.SUCCESS and self.is_waiting_for_manual:
            return PipelineStatus.MANUAL
        return self.pipeline.status

    @property
    def current_step_label(self) -> str | None:
        if self.current_job is None:
            return None
        return self.current_job.label

    @property
    def failed_step_label(self) -> str | None:
        """Label for the failed job, e.g. "test › rspec (2 retries)"."""
        if self.failed_job is None:
            return None
        base = self.failed_job.label
        if self.retry_count > 0:
            noun = "retry" if self.retry_count == 1 else "retries"
            return f"{base} ({self.retry_count} {noun})"
        return base

    @property
    def manual_step_label(self) -> str | None:
        if not self.manual_jobs:
            return None
        return ", ".join(job.label for job in self.manual_jobs)


def canonicalize(tracked: Iterable[TrackedPipeline]) -> dict[CanonicalKey, TrackedPipeline]:
    """Pick the authoritative pipeline for each (project, ref).

    The pipeline with the highest ID wins; IDs are assigned monotonically, so
    this is the most recently created run on the branch.
    """
    latest: dict[CanonicalKey, TrackedPipeline] = {}
    for item in tracked:
        key = item.canonical_key
        existing = latest.get(key)
        if existing is None or item.id > existing.id:
            latest[key] = item
    return latest


@dataclass(frozen=True)
class Notification:
    """A notification produced by a status transition."""

    title: str
    body: str
    link: str | None
    pipeline_id: int
    status: PipelineStatus


@dataclass(frozen=True)
class MonitorSnapshot:
    """Immutable view of the monitor state published at the end of a cycle.

    Attributes:
        pipelines: Tracked pipelines, newest pipeline ID first.
        current_user: The authenticated user, once known.
        is_configured: Whether credentials are present.
        is_connected: Whether the last cycle reached GitLab.
        last_error: Human-readable error of the last failed cycle.
        last_refresh: When the pipelines were last refreshed.
    """

    pipelines: tuple[TrackedPipeline, ...] = ()
    current_user: GitLabUser | None = None
    is_configured: bool = True
    is_connected: bool = False
    last_error: str | None = None
    last_refresh: datetime | None = None

    def latest_by_ref(self) -> dict[CanonicalKey, TrackedPipeline]:
        return canonicalize(self.pipelines)

    def aggregate_status(self) -> PipelineStatus | None:
        """Highest-priority effective status among the canonical pipelines."""
        statuses = [t.effective_status for t in self.latest_by_ref().values()]
        if not statuses:
            return None
        return max(statuses, key=lambda s: s.priority)

    def sorted_by_created(self) -> list[TrackedPipeline]:
        """Pipelines in display order: newest creation time first."""
        # Pipelines without a creation time sort last
        return sorted(
            self.pipelines,
            key=lambda t: (
                t.pipeline.created_at is not None,
                t.pipeline.created_at.timestamp() if t.pipeline.created_at else 0.0,
            ),
            reverse=True,
        )


@dataclass
class CycleResult:
    """Outcome of a single poll cycle.

    Attributes:
        completed: Whether the cycle ran to the end and published a snapshot.
        notifications: Notifications emitted during the cycle.
        error: Error message when the cycle was aborted.
    """

    completed: bool
    notifications: list[Notification] = field(default_factory=list)
    error: str | None = None
