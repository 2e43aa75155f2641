"""Data models for the GitLab API client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, assert_never


class PipelineStatus(StrEnum):
    """Pipeline (and job) status as reported by GitLab."""

    CREATED = "created"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    PREPARING = "preparing"
    PENDING = "pending"
    RUNNING = "running"
    SCHEDULED = "scheduled"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"

    @property
    def is_active(self) -> bool:
        """Whether the pipeline is still queued or executing."""
        match self:
            case (
                PipelineStatus.CREATED
                | PipelineStatus.WAITING_FOR_RESOURCE
                | PipelineStatus.PREPARING
                | PipelineStatus.PENDING
                | PipelineStatus.RUNNING
                | PipelineStatus.SCHEDULED
            ):
                return True
            case (
                PipelineStatus.SUCCESS
                | PipelineStatus.FAILED
                | PipelineStatus.CANCELED
                | PipelineStatus.SKIPPED
                | PipelineStatus.MANUAL
            ):
                return False
            case _:
                assert_never(self)

    @property
    def is_terminal(self) -> bool:
        """Whether the pipeline has reached a final outcome."""
        match self:
            case (
                PipelineStatus.SUCCESS
                | PipelineStatus.FAILED
                | PipelineStatus.CANCELED
                | PipelineStatus.SKIPPED
            ):
                return True
            case (
                PipelineStatus.CREATED
                | PipelineStatus.WAITING_FOR_RESOURCE
                | PipelineStatus.PREPARING
                | PipelineStatus.PENDING
                | PipelineStatus.RUNNING
                | PipelineStatus.SCHEDULED
                | PipelineStatus.MANUAL
            ):
                return False
            case _:
                assert_never(self)

    @property
    def priority(self) -> int:
        """Priority for summary aggregation -- higher means more attention needed."""
        match self:
            case PipelineStatus.FAILED:
                return 100
            case PipelineStatus.RUNNING:
                return 90
            case (
                PipelineStatus.PENDING
                | PipelineStatus.CREATED
                | PipelineStatus.WAITING_FOR_RESOURCE
                | PipelineStatus.PREPARING
            ):
                return 80
            case PipelineStatus.MANUAL:
                return 70
            case PipelineStatus.SCHEDULED:
                return 60
            case PipelineStatus.SUCCESS:
                return 50
            case PipelineStatus.CANCELED:
                return 40
            case PipelineStatus.SKIPPED:
                return 30
            case _:
                assert_never(self)

    @property
    def display_name(self) -> str:
        match self:
            case PipelineStatus.WAITING_FOR_RESOURCE:
                return "Waiting"
            case PipelineStatus.SUCCESS:
                return "Passed"
            case PipelineStatus.FAILED:
                return "Failed"
            case PipelineStatus.CANCELED:
                return "Canceled"
            case PipelineStatus.RUNNING:
                return "Running"
            case PipelineStatus.PENDING:
                return "Pending"
            case PipelineStatus.CREATED:
                return "Created"
            case PipelineStatus.PREPARING:
                return "Preparing"
            case PipelineStatus.SKIPPED:
                return "Skipped"
            case PipelineStatus.MANUAL:
                return "Manual"
            case PipelineStatus.SCHEDULED:
                return "Scheduled"
            case _:
                assert_never(self)

    @property
    def color_name(self) -> str:
        match self:
            case PipelineStatus.SUCCESS:
                return "green"
            case PipelineStatus.FAILED:
                return "red"
            case PipelineStatus.RUNNING:
                return "blue"
            case (
                PipelineStatus.PENDING
                | PipelineStatus.CREATED
                | PipelineStatus.WAITING_FOR_RESOURCE
                | PipelineStatus.PREPARING
            ):
                return "orange"
            case PipelineStatus.CANCELED | PipelineStatus.SKIPPED:
                return "gray"
            case PipelineStatus.MANUAL:
                return "purple"
            case PipelineStatus.SCHEDULED:
                return "indigo"
            case _:
                assert_never(self)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitLab ISO 8601 timestamp (with or without fractional seconds)."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way GitLab expects in query parameters."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class GitLabUser:
    """The authenticated GitLab user."""

    id: int
    username: str
    name: str
    avatar_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitLabUser:
        return cls(
            id=int(data["id"]),
            username=data["username"],
            name=data.get("name") or data["username"],
            avatar_url=data.get("avatar_url"),
        )


@dataclass(frozen=True)
class GitLabProject:
    """A GitLab project the user is a member of."""

    id: int
    name: str
    name_with_namespace: str
    path_with_namespace: str
    web_url: str = ""
    last_activity_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitLabProject:
        return cls(
            id=int(data["id"]),
            name=data["name"],
            name_with_namespace=data.get("name_with_namespace") or data["name"],
            path_with_namespace=data["path_with_namespace"],
            web_url=data.get("web_url") or "",
            last_activity_at=parse_timestamp(data.get("last_activity_at")),
        )


@dataclass(frozen=True)
class PipelineRecord:
    """A pipeline run as returned by the pipelines endpoint."""

    id: int
    status: PipelineStatus
    ref: str
    sha: str
    web_url: str
    iid: int | None = None
    project_id: int | None = None
    source: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    def duration(self, now: datetime | None = None) -> float | None:
        """Seconds between start and finish (or now, if still running)."""
        if self.started_at is None:
            return None
        end = self.finished_at or now or datetime.now(UTC)
        return (end - self.started_at).total_seconds()

    @property
    def duration_text(self) -> str:
        duration = self.duration()
        if duration is None:
            return "--"
        minutes, seconds = divmod(int(duration), 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PipelineRecord:
        iid = data.get("iid")
        project_id = data.get("project_id")
        return cls(
            id=int(data["id"]),
            iid=int(iid) if iid is not None else None,
            project_id=int(project_id) if project_id is not None else None,
            status=PipelineStatus(data["status"]),
            source=data.get("source"),
            ref=data["ref"],
            sha=data.get("sha") or "",
            web_url=data.get("web_url") or "",
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            started_at=parse_timestamp(data.get("started_at")),
            finished_at=parse_timestamp(data.get("finished_at")),
        )


@dataclass(frozen=True)
class JobRecord:
    """A single job of a pipeline."""

    id: int
    name: str
    stage: str
    status: PipelineStatus

    @property
    def label(self) -> str:
        """Short label, e.g. "build" or "test › rspec"."""
        if self.stage.lower() == self.name.lower():
            return self.stage
        return f"{self.stage} › {self.name}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> JobRecord:
        return cls(
            id=int(data["id"]),
            name=data["name"],
            stage=data.get("stage") or "",
            status=PipelineStatus(data["status"]),
        )
