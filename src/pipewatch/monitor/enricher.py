"""JobEnricher - Derives current step, failed step and manual gates from jobs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from pipewatch.gitlab.models import JobRecord, PipelineStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pipewatch.gitlab import GitLabClient
    from pipewatch.monitor.models import TrackedPipeline

logger = logging.getLogger(__name__)

# What a user most wants to see as "what's happening now", best first
CURRENT_JOB_PREFERENCE = (
    PipelineStatus.RUNNING,
    PipelineStatus.PENDING,
    PipelineStatus.CREATED,
)


def first_with_status(jobs: Sequence[JobRecord], status: PipelineStatus) -> JobRecord | None:
    return next((job for job in jobs if job.status == status), None)


def select_current_job(jobs: Sequence[JobRecord]) -> JobRecord | None:
    """First job matching the highest-ranked status in CURRENT_JOB_PREFERENCE."""
    for status in CURRENT_JOB_PREFERENCE:
        job = first_with_status(jobs, status)
        if job is not None:
            return job
    return None


def count_retries(jobs: Sequence[JobRecord], failed_job: JobRecord) -> int:
    """Attempts of `failed_job` beyond the first, counted by job name."""
    attempts = sum(1 for job in jobs if job.name == failed_job.name)
    return max(0, attempts - 1)


def select_manual_jobs(jobs: Sequence[JobRecord]) -> tuple[JobRecord, ...]:
    return tuple(job for job in jobs if job.status == PipelineStatus.MANUAL)


def enrich(tracked: TrackedPipeline, jobs: Sequence[JobRecord]) -> TrackedPipeline:
    """Return `tracked` with job-derived fields filled in."""
    status = tracked.pipeline.status
    current_job = None
    failed_job = None
    retry_count = 0

    if status.is_active:
        current_job = select_current_job(jobs)

    if status == PipelineStatus.FAILED:
        failed_job = first_with_status(jobs, PipelineStatus.FAILED)
        if failed_job is not None:
            retry_count = count_retries(jobs, failed_job)

    return replace(
        tracked,
        current_job=current_job,
        failed_job=failed_job,
        retry_count=retry_count,
        manual_jobs=select_manual_jobs(jobs),
    )


class JobEnricher:
    """Fetches jobs for every tracked pipeline and enriches it."""

    def __init__(self, client: GitLabClient) -> None:
        self.client = client

    async def enrich_all(self, tracked: Sequence[TrackedPipeline]) -> list[TrackedPipeline]:
        """Enrich all pipelines, fetching their jobs concurrently.

        A failed job request leaves the pipeline without job details.

        Args:
            tracked: Reconciled pipelines.

        Returns:
            Enriched pipelines, in the same order as `tracked`.
        """
        if not tracked:
            return []

        job_lists = await asyncio.gather(*(self._fetch_jobs(t) for t in tracked))
        return [enrich(t, jobs) for t, jobs in zip(tracked, job_lists, strict=True)]

    async def _fetch_jobs(self, tracked: TrackedPipeline) -> list[JobRecord]:
        try:
            return await self.client.fetch_jobs(
                project_id=tracked.project_id,
                pipeline_id=tracked.id,
            )
        except Exception as e:
            logger.debug("Could not fetch jobs for pipeline #%d: %s", tracked.id, e)
            return []
