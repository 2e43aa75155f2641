"""Control endpoints for the poll scheduler."""

from fastapi import APIRouter

from pipewatch.api.dependencies import SchedulerDep
from pipewatch.api.models import ActionResponse, APIResponse

router = APIRouter(tags=["control"])


@router.post("/poll", response_model=APIResponse[ActionResponse])
def trigger_poll(scheduler: SchedulerDep) -> APIResponse[ActionResponse]:
    """Run one poll cycle now, outside the timer cadence."""
    if not scheduler.is_running:
        return APIResponse(
            data=ActionResponse(message="Monitor is not running", accepted=False)
        )
    if not scheduler.trigger():
        return APIResponse(
            data=ActionResponse(message="Poll already in progress", accepted=False)
        )
    return APIResponse(data=ActionResponse(message="Poll triggered"))


@router.post("/monitor/start", response_model=APIResponse[ActionResponse])
async def start_monitor(scheduler: SchedulerDep) -> APIResponse[ActionResponse]:
    """Start polling with the current credentials."""
    if not await scheduler.start():
        return APIResponse(
            data=ActionResponse(message="Not configured", accepted=False),
            error="GitLab credentials are missing",
        )
    return APIResponse(data=ActionResponse(message="Monitor started"))


@router.post("/monitor/stop", response_model=APIResponse[ActionResponse])
async def stop_monitor(scheduler: SchedulerDep) -> APIResponse[ActionResponse]:
    """Stop polling. The last known pipelines stay available."""
    await scheduler.stop()
    return APIResponse(data=ActionResponse(message="Monitor stopped"))


@router.post("/monitor/restart", response_model=APIResponse[ActionResponse])
async def restart_monitor(scheduler: SchedulerDep) -> APIResponse[ActionResponse]:
    """Restart polling, forgetting all previously seen statuses."""
    if not await scheduler.restart():
        return APIResponse(
            data=ActionResponse(message="Not configured", accepted=False),
            error="GitLab credentials are missing",
        )
    return APIResponse(data=ActionResponse(message="Monitor restarted"))
