"""Tests for /api/utils routes (liveness, health-check)."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient


def test_liveness_is_public(client: TestClient) -> None:
    r = client.get("/api/utils/liveness")
    assert r.status_code == 200
    assert r.json() is True


def test_health_check_returns_200_when_bucket_reachable(client: TestClient, s3: MagicMock) -> None:
    r = client.get("/api/utils/health-check")
    assert r.status_code == 200
    assert r.json() is True
    s3.head_bucket.assert_called_once_with(Bucket="test-bucket")


def test_health_check_returns_503_when_bucket_unreachable(client: TestClient, s3: MagicMock) -> None:
    s3.head_bucket.side_effect = RuntimeError("403")
    r = client.get("/api/utils/health-check")
    assert r.status_code == 503
    data = r.json()
    assert data["error"] == "Service Unavailable"
    assert "s3" in data["failures"]


def test_health_check_wrong_method(client: TestClient) -> None:
    r = client.post("/api/utils/health-check")
    assert r.status_code == 405
    assert r.headers["allow"] == "GET"
