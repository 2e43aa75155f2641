"""Custom exceptions for the GitLab API client."""


class GitLabError(Exception):
    """Base exception for GitLab API errors."""


class InvalidRequestError(GitLabError):
    """The request could not be built (e.g. malformed instance URL)."""


class InvalidResponseError(GitLabError):
    """The response body could not be decoded into the expected records."""


class GitLabConnectionError(GitLabError):
    """The instance could not be reached (timeout, refused connection, DNS)."""


class UnauthorizedError(GitLabError):
    """Token is invalid or expired (401)."""


class ForbiddenError(GitLabError):
    """Token lacks the required scopes (403)."""


class NotFoundError(GitLabError):
    """Resource not found (404)."""


class RateLimitedError(GitLabError):
    """Too many requests (429)."""


class GitLabHTTPError(GitLabError):
    """Any other non-2xx response."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"HTTP error {status_code}")
