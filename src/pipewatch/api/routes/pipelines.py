"""Tracked pipeline endpoints."""

from fastapi import APIRouter, Query

from pipewatch.api.dependencies import SchedulerDep
from pipewatch.api.models import APIResponse, TrackedPipelineResponse, tracked_to_response

router = APIRouter(prefix="/pipelines", tags=["pipelines"])


@router.get("", response_model=APIResponse[list[TrackedPipelineResponse]])
def list_pipelines(
    scheduler: SchedulerDep,
    latest_only: bool = Query(
        default=False, description="Only the latest pipeline per project and branch"
    ),
) -> APIResponse[list[TrackedPipelineResponse]]:
    """List tracked pipelines from the last completed poll, newest first."""
    snapshot = scheduler.monitor.snapshot
    pipelines = snapshot.sorted_by_created()

    if latest_only:
        canonical_ids = {t.id for t in snapshot.latest_by_ref().values()}
        pipelines = [t for t in pipelines if t.id in canonical_ids]

    return APIResponse(data=[tracked_to_response(t) for t in pipelines])
