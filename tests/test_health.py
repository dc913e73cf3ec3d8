"""Tests for health check endpoints."""

from fastapi.testclient import TestClient

from recipesnap.main import app


def test_health_check() -> None:
    """Test basic health check endpoint."""
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "recipesnap-api"}


def test_root_endpoint() -> None:
    """Test root endpoint returns API info."""
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Recipesnap API"
    assert "version" in data
    assert data["docs"] == "/docs"
    assert data["health"] == "/health"


def test_health_carries_request_id() -> None:
    """Test that every response is tagged with a request id."""
    client = TestClient(app)
    response = client.get("/health", headers={"X-Request-ID": "health-check-1"})
    assert response.headers["X-Request-ID"] == "health-check-1"

    generated = client.get("/health").headers["X-Request-ID"]
    assert len(generated) == 32


def test_api_routes_are_mounted() -> None:
    """Test that the recipe, shopping list and profile routers are registered."""
    paths = TestClient(app).get("/openapi.json").json()["paths"]
    assert "/api/v1/recipes/generate" in paths
    assert "/api/v1/shopping-list/export" in paths
    assert "/api/v1/profile" in paths
