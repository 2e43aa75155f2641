"""Reconciler - Canonical pipeline per branch and stale-failure supersession."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pipewatch.gitlab.models import PipelineStatus
from pipewatch.monitor.models import CanonicalKey, TrackedPipeline, canonicalize

if TYPE_CHECKING:
    from pipewatch.gitlab import GitLabClient

logger = logging.getLogger(__name__)

__all__ = ["ReconcileResult", "Reconciler", "canonicalize"]


@dataclass
class ReconcileResult:
    """Reconciled pipeline set.

    Attributes:
        tracked: All tracked pipelines, including non-canonical duplicates and
            pipelines added because they supersede a failed one.
        canonical: Authoritative pipeline per (project, ref).
        superseding: Pipelines added by the supersession check.
    """

    tracked: list[TrackedPipeline]
    canonical: dict[CanonicalKey, TrackedPipeline]
    superseding: list[TrackedPipeline]


class Reconciler:
    """Collapses raw pipelines per branch and resolves superseded failures.

    A developer's own last pipeline on a branch may have failed while someone
    else has since pushed a fix. For every failed canonical pipeline the latest
    pipeline on the ref (by anyone) is looked up; when it is newer it joins the
    tracked set and becomes canonical for the ref.
    """

    def __init__(self, client: GitLabClient) -> None:
        self.client = client

    async def reconcile(self, tracked: list[TrackedPipeline]) -> ReconcileResult:
        """Canonicalize `tracked` and add pipelines superseding failed ones.

        Args:
            tracked: Pipelines returned by the fetch phase.

        Returns:
            ReconcileResult with the extended tracked list and canonical map.
        """
        canonical = canonicalize(tracked)
        failed = [t for t in canonical.values() if t.pipeline.status == PipelineStatus.FAILED]

        superseding: list[TrackedPipeline] = []
        if failed:
            results = await asyncio.gather(*(self._find_superseding(t) for t in failed))
            superseding = [r for r in results if r is not None]

        if not superseding:
            return ReconcileResult(tracked=list(tracked), canonical=canonical, superseding=[])

        for item in superseding:
            logger.info(
                "Pipeline #%d on %s supersedes failed canonical pipeline in project %d",
                item.id,
                item.ref,
                item.project_id,
            )

        combined = [*tracked, *superseding]
        return ReconcileResult(
            tracked=combined,
            canonical=canonicalize(combined),
            superseding=superseding,
        )

    async def _find_superseding(self, failed: TrackedPipeline) -> TrackedPipeline | None:
        """Latest pipeline on the failed pipeline's ref, if strictly newer."""
        try:
            latest = await self.client.fetch_latest_pipeline(
                project_id=failed.project_id,
                ref=failed.ref,
            )
        except Exception as e:
            logger.debug(
                "Supersession lookup failed for %d/%s: %s", failed.project_id, failed.ref, e
            )
            return None

        if latest is None or latest.id <= failed.id:
            return None

        return TrackedPipeline(
            pipeline=latest,
            project_name=failed.project_name,
            project_id=failed.project_id,
        )
