"""Unit tests for control routes."""

import pytest
from fastapi.testclient import TestClient

from tests.unit.api.mocks import MockScheduler


@pytest.mark.unit
class TestTriggerPoll:
    """Tests for POST /poll."""

    def test_trigger_poll(self, client: TestClient, scheduler: MockScheduler) -> None:
        scheduler.running = True

        response = client.post("/api/v1/poll")

        assert response.status_code == 200
        assert response.json()["data"] == {"message": "Poll triggered", "accepted": True}
        assert scheduler.triggered == 1

    def test_trigger_poll_busy(self, client: TestClient, scheduler: MockScheduler) -> None:
        scheduler.running = True
        scheduler.busy = True

        data = client.post("/api/v1/poll").json()["data"]

        assert data == {"message": "Poll already in progress", "accepted": False}
        assert scheduler.triggered == 0

    def test_trigger_poll_not_running(
        self, client: TestClient, scheduler: MockScheduler
    ) -> None:
        data = client.post("/api/v1/poll").json()["data"]

        assert data["accepted"] is False
        assert data["message"] == "Monitor is not running"


@pytest.mark.unit
class TestMonitorLifecycle:
    """Tests for POST /monitor/start, /monitor/stop and /monitor/restart."""

    def test_start(self, client: TestClient, scheduler: MockScheduler) -> None:
        response = client.post("/api/v1/monitor/start")

        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Monitor started"
        assert scheduler.running is True

    def test_start_not_configured(self, client: TestClient, scheduler: MockScheduler) -> None:
        scheduler.configured = False

        data = client.post("/api/v1/monitor/start").json()

        assert data["data"] == {"message": "Not configured", "accepted": False}
        assert data["error"] == "GitLab credentials are missing"

    def test_stop(self, client: TestClient, scheduler: MockScheduler) -> None:
        scheduler.running = True

        data = client.post("/api/v1/monitor/stop").json()["data"]

        assert data["message"] == "Monitor stopped"
        assert scheduler.running is False

    def test_restart(self, client: TestClient, scheduler: MockScheduler) -> None:
        data = client.post("/api/v1/monitor/restart").json()["data"]

        assert data["message"] == "Monitor restarted"
        assert scheduler.restarts == 1
