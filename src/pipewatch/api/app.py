"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pipewatch import __version__
from pipewatch.api.dependencies import (
    close_event_manager,
    close_scheduler,
    init_event_manager,
    init_scheduler,
)
from pipewatch.api.models import APIResponse
from pipewatch.api.routes import control, events, pipelines
from pipewatch.api.routes import settings as settings_routes
from pipewatch.api.routes import status as status_routes
from pipewatch.config import ConfigError, MonitorSettings
from pipewatch.monitor import PipelineMonitor
from pipewatch.notify import (
    CompositeNotificationSink,
    EventNotificationSink,
    LoggingNotificationSink,
)
from pipewatch.scheduler import PollScheduler

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    monitor_settings: MonitorSettings | None = getattr(app.state, "settings", None)
    if monitor_settings is None:
        monitor_settings = MonitorSettings.from_env()
    event_manager = init_event_manager()

    sink = CompositeNotificationSink(
        [LoggingNotificationSink(), EventNotificationSink(event_manager)]
    )
    monitor = PipelineMonitor(notification_sink=sink)
    scheduler = PollScheduler(
        monitor=monitor,
        settings=monitor_settings,
        event_manager=event_manager,
    )
    init_scheduler(scheduler)

    if app.state.autostart:
        await scheduler.start()

    yield
    # Shutdown
    await scheduler.shutdown()
    close_scheduler()
    close_event_manager()


def create_app(settings: MonitorSettings | None = None, autostart: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Monitor settings. Read from the environment at startup when omitted.
        autostart: Whether to start polling on startup.
    """
    app = FastAPI(
        title="PipeWatch API",
        description="REST API for PipeWatch - GitLab pipeline monitor",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings
    app.state.autostart = autostart

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_request: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    app.include_router(status_routes.router, prefix="/api/v1")
    app.include_router(pipelines.router, prefix="/api/v1")
    app.include_router(control.router, prefix="/api/v1")
    app.include_router(settings_routes.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
