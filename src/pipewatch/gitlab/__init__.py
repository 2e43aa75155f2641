"""GitLab client - Typed access to the GitLab REST API."""

from pipewatch.gitlab.client import GitLabClient
from pipewatch.gitlab.exceptions import (
    ForbiddenError,
    GitLabConnectionError,
    GitLabError,
    GitLabHTTPError,
    InvalidRequestError,
    InvalidResponseError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from pipewatch.gitlab.models import (
    GitLabProject,
    GitLabUser,
    JobRecord,
    PipelineRecord,
    PipelineStatus,
)

__all__ = [
    "ForbiddenError",
    "GitLabClient",
    "GitLabConnectionError",
    "GitLabError",
    "GitLabHTTPError",
    "GitLabProject",
    "GitLabUser",
    "InvalidRequestError",
    "InvalidResponseError",
    "JobRecord",
    "NotFoundError",
    "PipelineRecord",
    "PipelineStatus",
    "RateLimitedError",
    "UnauthorizedError",
]
