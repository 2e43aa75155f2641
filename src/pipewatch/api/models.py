"""Pydantic models for REST API."""

from datetime import datetime
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pipewatch.config import MonitorSettings
    from pipewatch.gitlab import GitLabUser, JobRecord
    from pipewatch.monitor import MonitorSnapshot, TrackedPipeline
    from pipewatch.scheduler import SchedulerStatus

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Status models


class UserResponse(BaseModel):
    """Response model for the authenticated GitLab user."""

    id: int
    username: str
    name: str
    avatar_url: str | None = None


def user_to_response(user: "GitLabUser | None") -> UserResponse | None:
    if user is None:
        return None
    return UserResponse(
        id=user.id, username=user.username, name=user.name, avatar_url=user.avatar_url
    )


class MonitorStatusResponse(BaseModel):
    """Response model for the overall monitor status."""

    configured: bool
    connected: bool
    running: bool
    polling: bool
    interval: float
    last_error: str | None
    last_refresh: datetime | None
    user: UserResponse | None
    aggregate_status: str | None
    aggregate_display_name: str | None
    aggregate_color: str | None
    pipeline_count: int


def status_to_response(
    snapshot: "MonitorSnapshot", scheduler_status: "SchedulerStatus"
) -> MonitorStatusResponse:
    """Build the status response from a snapshot and the scheduler status."""
    aggregate = snapshot.aggregate_status()
    return MonitorStatusResponse(
        configured=snapshot.is_configured,
        connected=snapshot.is_connected,
        running=scheduler_status.state == "running",
        polling=scheduler_status.polling,
        interval=scheduler_status.interval,
        last_error=snapshot.last_error,
        last_refresh=snapshot.last_refresh,
        user=user_to_response(snapshot.current_user),
        aggregate_status=aggregate.value if aggregate else None,
        aggregate_display_name=aggregate.display_name if aggregate else None,
        aggregate_color=aggregate.color_name if aggregate else None,
        pipeline_count=len(snapshot.pipelines),
    )


# Pipeline models


class JobResponse(BaseModel):
    """Response model for a pipeline job."""

    id: int
    name: str
    stage: str
    status: str
    label: str


def job_to_response(job: "JobRecord | None") -> JobResponse | None:
    if job is None:
        return None
    return JobResponse(
        id=job.id, name=job.name, stage=job.stage, status=job.status.value, label=job.label
    )


class TrackedPipelineResponse(BaseModel):
    """Response model for a tracked pipeline."""

    id: int
    iid: int | None
    project_id: int
    project_name: str
    status: str
    effective_status: str
    display_name: str
    color: str
    ref: str
    sha: str
    short_sha: str
    web_url: str
    source: str | None
    created_at: datetime | None
    updated_at: datetime | None
    started_at: datetime | None
    finished_at: datetime | None
    duration_text: str
    current_job: JobResponse | None
    failed_job: JobResponse | None
    retry_count: int
    manual_jobs: list[JobResponse]
    current_step_label: str | None
    failed_step_label: str | None
    manual_step_label: str | None


def tracked_to_response(tracked: "TrackedPipeline") -> TrackedPipelineResponse:
    """Convert a TrackedPipeline to TrackedPipelineResponse."""
    pipeline = tracked.pipeline
    effective = tracked.effective_status
    return TrackedPipelineResponse(
        id=pipeline.id,
        iid=pipeline.iid,
        project_id=tracked.project_id,
        project_name=tracked.project_name,
        status=pipeline.status.value,
        effective_status=effective.value,
        display_name=effective.display_name,
        color=effective.color_name,
        ref=pipeline.ref,
        sha=pipeline.sha,
        short_sha=pipeline.short_sha,
        web_url=pipeline.web_url,
        source=pipeline.source,
        created_at=pipeline.created_at,
        updated_at=pipeline.updated_at,
        started_at=pipeline.started_at,
        finished_at=pipeline.finished_at,
        duration_text=pipeline.duration_text,
        current_job=job_to_response(tracked.current_job),
        failed_job=job_to_response(tracked.failed_job),
        retry_count=tracked.retry_count,
        manual_jobs=[r for r in (job_to_response(j) for j in tracked.manual_jobs) if r],
        current_step_label=tracked.current_step_label,
        failed_step_label=tracked.failed_step_label,
        manual_step_label=tracked.manual_step_label,
    )


# Control models


class ActionResponse(BaseModel):
    """Response model for control actions (start/stop/restart/poll)."""

    message: str
    accepted: bool = True


# Settings models


class SettingsResponse(BaseModel):
    """Response model for settings. The token itself is never returned."""

    base_url: str
    token_set: bool
    polling_interval: float
    effective_interval: float
    notify_on_success: bool
    notify_on_failure: bool


def settings_to_response(settings: "MonitorSettings") -> SettingsResponse:
    return SettingsResponse(
        base_url=settings.base_url,
        token_set=bool(settings.token),
        polling_interval=settings.polling_interval,
        effective_interval=settings.effective_interval,
        notify_on_success=settings.notify_on_success,
        notify_on_failure=settings.notify_on_failure,
    )


class SettingsUpdate(BaseModel):
    """Request model for updating settings (partial update)."""

    base_url: str | None = Field(default=None, min_length=1, max_length=2048)
    token: str | None = Field(default=None, max_length=512)
    polling_interval: float | None = Field(default=None, gt=0)
    notify_on_success: bool | None = None
    notify_on_failure: bool | None = None
