"""Unit tests for pipeline routes."""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
class TestListPipelines:
    """Tests for GET /pipelines."""

    def test_list_pipelines_newest_first(self, client: TestClient) -> None:
        response = client.get("/api/v1/pipelines")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] is None
        assert [p["id"] for p in data["data"]] == [20, 12, 11]

    def test_list_pipelines_latest_only(self, client: TestClient) -> None:
        """The older failed run on api/main is hidden."""
        data = client.get("/api/v1/pipelines", params={"latest_only": True}).json()["data"]

        assert [p["id"] for p in data] == [20, 12]

    def test_pipeline_fields(self, client: TestClient) -> None:
        data = client.get("/api/v1/pipelines").json()["data"]
        by_id = {p["id"]: p for p in data}

        running = by_id[12]
        assert running["project_name"] == "api"
        assert running["status"] == "running"
        assert running["current_step_label"] == "test › rspec"
        assert running["current_job"]["name"] == "rspec"
        assert running["web_url"] == "https://gitlab.example.com/group/api/-/pipelines/12"

        gated = by_id[20]
        assert gated["status"] == "success"
        assert gated["effective_status"] == "manual"
        assert gated["display_name"] == "Manual"
        assert gated["manual_step_label"] == "deploy › deploy-prod"
        assert [j["name"] for j in gated["manual_jobs"]] == ["deploy-prod"]
