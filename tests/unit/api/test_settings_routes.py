"""Unit tests for settings routes."""

import pytest
from fastapi.testclient import TestClient

from tests.unit.api.mocks import MockScheduler


@pytest.mark.unit
class TestGetSettings:
    """Tests for GET /settings."""

    def test_get_settings_hides_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/settings")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["base_url"] == "https://gitlab.example.com"
        assert data["token_set"] is True
        assert "token" not in data
        assert "glpat" not in response.text


@pytest.mark.unit
class TestUpdateSettings:
    """Tests for PUT /settings."""

    def test_toggle_change_does_not_restart(
        self, client: TestClient, scheduler: MockScheduler
    ) -> None:
        response = client.put("/api/v1/settings", json={"notify_on_success": False})

        assert response.status_code == 200
        assert response.json()["data"]["notify_on_success"] is False
        assert scheduler.settings.notify_on_success is False
        assert scheduler.restarts == 0

    def test_token_change_restarts(self, client: TestClient, scheduler: MockScheduler) -> None:
        client.put("/api/v1/settings", json={"token": "glpat-another-token"})

        assert scheduler.settings.token == "glpat-another-token"
        assert scheduler.restarts == 1

    def test_base_url_trailing_slash_stripped(
        self, client: TestClient, scheduler: MockScheduler
    ) -> None:
        data = client.put(
            "/api/v1/settings", json={"base_url": "https://gitlab.internal/"}
        ).json()["data"]

        assert data["base_url"] == "https://gitlab.internal"
        assert scheduler.restarts == 1

    def test_interval_change_restarts_and_clamps(
        self, client: TestClient, scheduler: MockScheduler
    ) -> None:
        data = client.put("/api/v1/settings", json={"polling_interval": 5}).json()["data"]

        assert data["polling_interval"] == 5.0
        assert data["effective_interval"] == 10.0
        assert scheduler.restarts == 1

    def test_invalid_interval_rejected(self, client: TestClient) -> None:
        response = client.put("/api/v1/settings", json={"polling_interval": 0})

        assert response.status_code == 422
