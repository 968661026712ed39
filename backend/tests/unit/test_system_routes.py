import time
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

from backend.src.api.main import app

client = TestClient(app)


def test_api_root_reports_timestamp():
    before = int(time.time() * 1000)

    response = client.get("/api")

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert before <= data["ts"] <= int(time.time() * 1000) + 1


def test_health_reports_database_ok():
    database = Mock()
    database.ping.return_value = True

    with patch("backend.src.api.routes.system.get_database_service", return_value=database):
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}


def test_health_is_503_when_database_unreachable():
    database = Mock()
    database.ping.return_value = False

    with patch("backend.src.api.routes.system.get_database_service", return_value=database):
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "database": "unreachable"}


def test_unknown_api_path_is_404():
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_cors_preflight_allows_owner_header():
    response = client.options(
        "/api/docs",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "x-owner,content-type",
        },
    )

    assert response.status_code == 200
    assert "x-owner" in response.headers["access-control-allow-headers"].lower()
