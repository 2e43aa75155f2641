"""Configuration loading for PipeWatch."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

DEFAULT_BASE_URL = "https://gitlab.com"
DEFAULT_POLLING_INTERVAL = 30.0
MIN_POLLING_INTERVAL = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when configuration is invalid."""


def normalize_base_url(url: str) -> str:
    """Strip trailing slashes and check the URL scheme.

    Raises:
        ConfigError: If the URL is not an http(s) URL.
    """
    url = url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"GitLab URL must start with http:// or https://, got {url!r}")
    return url


def resolve_polling_interval(configured: float | None) -> float:
    """Pick the polling interval to use, in seconds.

    Candidates in order of preference:
    1. the configured value, if it is a positive number
    2. DEFAULT_POLLING_INTERVAL

    The chosen value is then clamped to MIN_POLLING_INTERVAL.
    """
    candidates = [configured, DEFAULT_POLLING_INTERVAL]
    chosen = next(c for c in candidates if c is not None and c > 0)
    return max(chosen, MIN_POLLING_INTERVAL)


@dataclass(frozen=True)
class MonitorSettings:
    """Settings consumed by the poll scheduler and the monitor.

    Credentials (base_url + token) are only read when a GitLab client is
    built, i.e. on scheduler start/restart.
    """

    base_url: str = DEFAULT_BASE_URL
    token: str = ""
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    notify_on_success: bool = True
    notify_on_failure: bool = True

    @property
    def is_configured(self) -> bool:
        """Whether credentials are present."""
        return bool(self.token) and bool(self.base_url)

    @property
    def effective_interval(self) -> float:
        """Polling interval actually used by the scheduler."""
        return resolve_polling_interval(self.polling_interval)

    def with_updates(self, **changes: Any) -> MonitorSettings:
        """Return a copy with the given (non-None) fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def credentials_changed(self, other: MonitorSettings) -> bool:
        """Whether `other` points at a different account or instance."""
        return self.base_url != other.base_url or self.token != other.token

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MonitorSettings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        token = env.get("GITLAB_TOKEN") or env.get("PIPEWATCH_GITLAB_TOKEN") or ""

        return cls(
            base_url=normalize_base_url(env.get("PIPEWATCH_GITLAB_URL", DEFAULT_BASE_URL)),
            token=token.strip(),
            polling_interval=_parse_float(
                env, "PIPEWATCH_POLL_INTERVAL", DEFAULT_POLLING_INTERVAL
            ),
            notify_on_success=_parse_bool(env, "PIPEWATCH_NOTIFY_SUCCESS", True),
            notify_on_failure=_parse_bool(env, "PIPEWATCH_NOTIFY_FAILURE", True),
        )


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e


def _parse_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")
