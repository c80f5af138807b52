"""Tests for the FastAPI service mode."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from codelocator.config import CodeLocatorConfig
from codelocator.pipeline import AnalysisPipeline
from codelocator.service import create_app
from tests._fixtures.project_builder import ProjectBuilder, node_project_files

PROBLEM = "实现用户登录和商品列表功能"


class _ExplodingPipeline:
    def run(self, *args, **kwargs):
        raise RuntimeError("secret internal path /srv/data")


@pytest.fixture
def client(scratch_config: CodeLocatorConfig) -> TestClient:
    app = create_app(lambda: AnalysisPipeline(scratch_config), config=scratch_config)
    return TestClient(app)


@pytest.fixture
def archive_bytes(project_builder: ProjectBuilder) -> bytes:
    project_builder.write(node_project_files())
    return project_builder.zip().read_bytes()


def _upload(data: bytes) -> dict[str, tuple[str, bytes, str]]:
    return {"code_zip": ("project.zip", data, "application/zip")}


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["provider"] == "mock"
    assert body["uptime"] >= 0


def test_root_and_info_endpoints(client: TestClient) -> None:
    root = client.get("/")
    info = client.get("/api/info")

    assert root.status_code == 200
    assert root.json()["endpoints"]["analyze"] == "POST /api/analyze"
    assert info.status_code == 200
    assert "POST /api/analyze" in info.json()["endpoints"]


def test_analyze_returns_report_and_summary(
    client: TestClient, archive_bytes: bytes, scratch_config: CodeLocatorConfig
) -> None:
    response = client.post(
        "/api/analyze", data={"problem_description": PROBLEM}, files=_upload(archive_bytes)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["data"]["feature_analysis"]) == 2
    assert body["data"]["analysis_metadata"]["total_files_analyzed"] == 4
    assert body["summary"]["total_features_analyzed"] == 2
    assert body["summary"]["analysis_quality_score"] == 90
    assert body["summary"]["has_functional_verification"] is False
    assert list(scratch_config.storage.upload_dir.iterdir()) == []


def test_analyze_with_verification(client: TestClient, archive_bytes: bytes) -> None:
    response = client.post(
        "/api/analyze",
        data={"problem_description": PROBLEM, "include_verification": "true"},
        files=_upload(archive_bytes),
    )

    assert response.status_code == 200
    body = response.json()
    assert "functional_verification" in body["data"]
    assert body["summary"]["analysis_quality_score"] == 100


def test_missing_inputs_are_rejected(client: TestClient) -> None:
    response = client.post("/api/analyze", data={})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["details"] == ["problem_description is required", "code_zip archive is required"]


def test_short_description_is_rejected(client: TestClient, archive_bytes: bytes) -> None:
    response = client.post(
        "/api/analyze", data={"problem_description": "login"}, files=_upload(archive_bytes)
    )

    assert response.status_code == 400


def test_corrupt_archive_is_unprocessable(
    client: TestClient, scratch_config: CodeLocatorConfig
) -> None:
    response = client.post(
        "/api/analyze", data={"problem_description": PROBLEM}, files=_upload(b"not a zip")
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert "not a zip" not in response.text
    assert list(scratch_config.storage.upload_dir.iterdir()) == []


def test_oversized_upload_is_rejected(scratch_config: CodeLocatorConfig, archive_bytes: bytes) -> None:
    config = replace(scratch_config, storage=replace(scratch_config.storage, max_upload_bytes=16))
    client = TestClient(create_app(lambda: AnalysisPipeline(config), config=config))

    response = client.post(
        "/api/analyze", data={"problem_description": PROBLEM}, files=_upload(archive_bytes)
    )

    assert response.status_code == 400
    assert "upload limit" in response.json()["details"][0]


def test_unexpected_failure_returns_generic_error(
    scratch_config: CodeLocatorConfig, archive_bytes: bytes
) -> None:
    app = create_app(lambda: _ExplodingPipeline(), config=scratch_config)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post(
        "/api/analyze", data={"problem_description": PROBLEM}, files=_upload(archive_bytes)
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "internal server error"}
    assert list(Path(scratch_config.storage.upload_dir).iterdir()) == []


def test_unknown_endpoint(client: TestClient) -> None:
    response = client.get("/api/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "endpoint not found"


def test_missing_archive_with_valid_description(client: TestClient) -> None:
    response = client.post("/api/analyze", data={"problem_description": PROBLEM})

    assert response.status_code == 400
    assert response.json()["details"] == ["code_zip archive is required"]
