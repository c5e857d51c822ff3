"""Tests for health endpoints, response headers and request metrics"""
import uuid

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness(client: TestClient):
    response = client.get("/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True


def test_liveness(client: TestClient):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_security_headers(client: TestClient):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_unknown_route(client: TestClient):
    assert client.get("/does-not-exist").status_code == 404


def _requests_total(method: str, endpoint: str, status: int):
    return REGISTRY.get_sample_value(
        "lexiom_http_requests_total",
        {"method": method, "endpoint": endpoint, "status": str(status)},
    )


def test_metrics_use_route_template(client: TestClient, super_admin, auth_headers):
    """Test ids in the URL are not used as metric label values"""
    path = f"/roles/{uuid.uuid4()}"
    before = _requests_total("DELETE", "/roles/{role_id}", 404) or 0

    response = client.delete(path, headers=auth_headers(super_admin))
    assert response.status_code == 404

    assert _requests_total("DELETE", "/roles/{role_id}", 404) == before + 1
    assert _requests_total("DELETE", path, 404) is None


def test_metrics_group_unmatched_paths(client: TestClient):
    path = f"/scan/{uuid.uuid4()}"
    before = _requests_total("GET", "unmatched", 404) or 0

    assert client.get(path).status_code == 404

    assert _requests_total("GET", "unmatched", 404) == before + 1
    assert _requests_total("GET", path, 404) is None
