"""PipelineFetcher - Concurrent per-project pipeline retrieval."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from pipewatch.monitor.models import TrackedPipeline

if TYPE_CHECKING:
    from pipewatch.gitlab import GitLabClient, GitLabProject, PipelineRecord

logger = logging.getLogger(__name__)

# How far back project activity and pipeline updates are considered
LOOKBACK_WINDOW = timedelta(hours=24)


def recency_cutoff(now: datetime | None = None) -> datetime:
    """Start of the look-back window."""
    return (now or datetime.now(UTC)) - LOOKBACK_WINDOW


class PipelineFetcher:
    """Fetches the user's recent pipelines across all recently active projects."""

    def __init__(self, client: GitLabClient) -> None:
        """Initialize the fetcher.

        Args:
            client: GitLab client used for all requests of the cycle.
        """
        self.client = client

    async def fetch(self, username: str, since: datetime) -> list[TrackedPipeline]:
        """Fetch pipelines triggered by `username` in every active project.

        The project list request is not guarded: its failure aborts the cycle.
        Per-project pipeline requests run concurrently and a failing project
        contributes no pipelines.

        Args:
            username: GitLab username that triggered the pipelines.
            since: Recency cutoff for project activity and pipeline updates.

        Returns:
            Pipelines of all projects that returned at least one, with project
            name and ID attached.
        """
        projects = await self.client.fetch_projects(last_activity_after=since)
        logger.info("Fetched %d project(s) active since %s", len(projects), since.isoformat())
        for project in projects:
            logger.debug("  - [%d] %s", project.id, project.path_with_namespace)

        results = await asyncio.gather(
            *(self._fetch_project(project, username, since) for project in projects)
        )

        tracked = [
            TrackedPipeline(pipeline=pipeline, project_name=project.name, project_id=project.id)
            for project, pipelines in results
            for pipeline in pipelines
        ]
        logger.info("Total tracked pipelines: %d", len(tracked))
        return tracked

    async def _fetch_project(
        self, project: GitLabProject, username: str, since: datetime
    ) -> tuple[GitLabProject, list[PipelineRecord]]:
        try:
            pipelines = await self.client.fetch_pipelines(
                project_id=project.id,
                username=username,
                updated_after=since,
            )
        except Exception as e:
            logger.warning(
                "Error fetching pipelines for %s [%d]: %s",
                project.path_with_namespace,
                project.id,
                e,
            )
            return project, []

        if pipelines:
            logger.debug("%s: %d pipeline(s)", project.path_with_namespace, len(pipelines))
            for p in pipelines:
                logger.debug("  #%d %s on %s (%s)", p.id, p.status.value, p.ref, p.short_sha)
        return project, pipelines
