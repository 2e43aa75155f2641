"""Fixtures for API route tests."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pipewatch.api.dependencies import get_scheduler
from pipewatch.api.routes import control, pipelines
from pipewatch.api.routes import settings as settings_routes
from pipewatch.api.routes import status as status_routes
from pipewatch.config import MonitorSettings
from pipewatch.gitlab import PipelineStatus
from pipewatch.monitor import PipelineMonitor
from tests.factories import FakeGitLabClient, make_job, make_pipeline, make_project
from tests.unit.api.mocks import MockScheduler, NullSink


@pytest.fixture
def monitor(settings: MonitorSettings) -> PipelineMonitor:
    """A monitor that has completed one cycle against a fake instance."""
    client = FakeGitLabClient(
        projects=[make_project(1, "api"), make_project(2, "web")],
        pipelines={
            1: [
                make_pipeline(12, PipelineStatus.RUNNING, ref="main"),
                make_pipeline(11, PipelineStatus.FAILED, ref="main"),
            ],
            2: [make_pipeline(20, PipelineStatus.SUCCESS, ref="release", project_id=2)],
        },
        jobs={
            12: [make_job(1, "rspec", "running", stage="test")],
            20: [make_job(2, "deploy-prod", "manual", stage="deploy")],
        },
    )
    monitor = PipelineMonitor(notification_sink=NullSink())
    asyncio.run(monitor.poll(client, settings))
    return monitor


@pytest.fixture
def scheduler(monitor: PipelineMonitor, settings: MonitorSettings) -> MockScheduler:
    return MockScheduler(monitor, settings)


@pytest.fixture
def app(scheduler: MockScheduler) -> FastAPI:
    """Create a test FastAPI app with mocked dependencies."""
    app = FastAPI()

    def override_get_scheduler():
        yield scheduler

    app.dependency_overrides[get_scheduler] = override_get_scheduler

    app.include_router(status_routes.router, prefix="/api/v1")
    app.include_router(pipelines.router, prefix="/api/v1")
    app.include_router(control.router, prefix="/api/v1")
    app.include_router(settings_routes.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
