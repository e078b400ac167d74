"""Tests for health endpoints."""

from httpx import AsyncClient


async def test_root_health_check(api_client: AsyncClient):
    response = await api_client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


async def test_api_health_check(api_client: AsyncClient):
    response = await api_client.get("/api/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "uptime_seconds" in data


async def test_database_health(api_client: AsyncClient):
    response = await api_client.get("/api/health/db")
    assert response.status_code == 200

    data = response.json()
    assert data["database"]["available"] is True
    assert data["database"]["error"] is None
