"""REST API for PipeWatch."""

from pipewatch.api.app import app, create_app
from pipewatch.api.models import (
    APIResponse,
    MonitorStatusResponse,
    SettingsResponse,
    TrackedPipelineResponse,
)

__all__ = [
    "APIResponse",
    "MonitorStatusResponse",
    "SettingsResponse",
    "TrackedPipelineResponse",
    "app",
    "create_app",
]
