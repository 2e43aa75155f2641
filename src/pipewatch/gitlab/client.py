"""GitLabClient - Async access to the GitLab REST API (v4)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

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
    format_timestamp,
)
from pipewatch.logging import sanitize_for_log, truncate_output

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger("pipewatch.gitlab")

PROJECTS_PER_PAGE = 100
PIPELINES_PER_PAGE = 5
JOBS_PER_PAGE = 100

# Status code -> exception for the classified error responses
_STATUS_ERRORS: dict[int, tuple[type[GitLabError], str]] = {
    401: (UnauthorizedError, "Invalid or expired token"),
    403: (ForbiddenError, "Access denied -- check token scopes"),
    404: (NotFoundError, "Resource not found"),
    429: (RateLimitedError, "Rate limited -- try again later"),
}


class GitLabClient:
    """Client for the subset of the GitLab REST API the monitor needs.

    One instance is bound to one set of credentials for its whole lifetime;
    a credential change means building a new client.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 15.0,
    ) -> None:
        """Initialize the GitLab client.

        Args:
            base_url: GitLab instance URL (e.g. "https://gitlab.com")
            token: Personal access token with read_api scope
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "PRIVATE-TOKEN": self.token,
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Issue a GET request and decode the JSON body.

        Args:
            path: API path, e.g. "/api/v4/user"
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            GitLabError: Classified by failure kind (see exceptions module)
        """
        try:
            response = await self.client.get(path, params=params)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidRequestError(f"Invalid GitLab URL: {self.base_url}") from e
        except httpx.TransportError as e:
            raise GitLabConnectionError(
                sanitize_for_log(f"Could not reach GitLab: {e}")
            ) from e

        if 200 <= response.status_code < 300:
            try:
                return response.json()
            except ValueError as e:
                logger.warning("Decode error for %s: %s", path, e)
                raise InvalidResponseError("Invalid response from GitLab") from e

        logger.debug(
            "GitLab returned %d for %s: %s",
            response.status_code,
            path,
            truncate_output(sanitize_for_log(response.text), max_length=500),
        )

        if response.status_code in _STATUS_ERRORS:
            error_cls, message = _STATUS_ERRORS[response.status_code]
            raise error_cls(message)

        raise GitLabHTTPError(response.status_code)

    async def _request_list(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        data = await self._request(path, params)
        if not isinstance(data, list):
            logger.warning("Expected a list from %s, got %s", path, type(data).__name__)
            raise InvalidResponseError("Invalid response from GitLab")
        return data

    @staticmethod
    def _decode(path: str, decode: Any, data: Any) -> Any:
        try:
            return decode(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Decode error for %s: %s", path, e)
            raise InvalidResponseError("Invalid response from GitLab") from e

    @staticmethod
    def _decode_items(path: str, decode: Any, items: list[Any]) -> list[Any]:
        """Decode list items, logging and skipping the ones that fail."""
        decoded = []
        for item in items:
            try:
                decoded.append(decode(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping undecodable item from %s: %s", path, e)
        return decoded

    async def fetch_current_user(self) -> GitLabUser:
        """Get the user the token belongs to."""
        path = "/api/v4/user"
        data = await self._request(path)
        user: GitLabUser = self._decode(path, GitLabUser.from_api, data)
        return user

    async def fetch_projects(self, last_activity_after: datetime | None = None) -> list[GitLabProject]:
        """List member projects, most recently active first.

        Follows pagination until a short page is returned.

        Args:
            last_activity_after: Only include projects with activity after this time
        """
        path = "/api/v4/projects"
        projects: list[GitLabProject] = []
        page = 1

        while True:
            params: dict[str, Any] = {
                "membership": "true",
                "simple": "true",
                "per_page": PROJECTS_PER_PAGE,
                "page": page,
                "order_by": "last_activity_at",
                "sort": "desc",
            }
            if last_activity_after is not None:
                params["last_activity_after"] = format_timestamp(last_activity_after)

            batch = await self._request_list(path, params)
            projects.extend(self._decode(path, GitLabProject.from_api, item) for item in batch)

            if len(batch) < PROJECTS_PER_PAGE:
                break
            page += 1

        return projects

    async def fetch_pipelines(
        self,
        project_id: int,
        username: str,
        updated_after: datetime | None = None,
    ) -> list[PipelineRecord]:
        """List the most recently updated pipelines triggered by a user.

        Args:
            project_id: GitLab project ID
            username: Only pipelines triggered by this user
            updated_after: Only pipelines updated after this time
        """
        path = f"/api/v4/projects/{project_id}/pipelines"
        params: dict[str, Any] = {
            "username": username,
            "per_page": PIPELINES_PER_PAGE,
            "order_by": "updated_at",
            "sort": "desc",
        }
        if updated_after is not None:
            params["updated_after"] = format_timestamp(updated_after)

        data = await self._request_list(path, params)
        pipelines: list[PipelineRecord] = self._decode_items(path, PipelineRecord.from_api, data)
        return pipelines

    async def fetch_jobs(self, project_id: int, pipeline_id: int) -> list[JobRecord]:
        """List the jobs of a pipeline (including retried attempts)."""
        path = f"/api/v4/projects/{project_id}/pipelines/{pipeline_id}/jobs"
        params: dict[str, Any] = {
            "per_page": JOBS_PER_PAGE,
            "include_retried": "true",
        }

        data = await self._request_list(path, params)
        jobs: list[JobRecord] = self._decode_items(path, JobRecord.from_api, data)
        return jobs

    async def fetch_latest_pipeline(self, project_id: int, ref: str) -> PipelineRecord | None:
        """Get the newest pipeline on a ref, regardless of who triggered it.

        Returns:
            The pipeline with the highest ID on the ref, or None if there is none
        """
        path = f"/api/v4/projects/{project_id}/pipelines"
        params: dict[str, Any] = {
            "ref": ref,
            "per_page": 1,
            "order_by": "id",
            "sort": "desc",
        }

        data = await self._request_list(path, params)
        if not data:
            return None
        latest: PipelineRecord = self._decode(path, PipelineRecord.from_api, data[0])
        return latest
