"""Monitor status endpoint."""

from fastapi import APIRouter

from pipewatch.api.dependencies import SchedulerDep
from pipewatch.api.models import APIResponse, MonitorStatusResponse, status_to_response

router = APIRouter(tags=["status"])


@router.get("/status", response_model=APIResponse[MonitorStatusResponse])
def get_status(scheduler: SchedulerDep) -> APIResponse[MonitorStatusResponse]:
    """Get connection state, last error and the aggregate pipeline status."""
    return APIResponse(
        data=status_to_response(scheduler.monitor.snapshot, scheduler.get_status())
    )
