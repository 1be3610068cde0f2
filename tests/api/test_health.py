"""Tests for health endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import app


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_root_health_check(async_client: AsyncClient):
    """Root endpoint answers without touching the database."""
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_api_health_check(async_client: AsyncClient):
    response = await async_client.get("/api/health")
    assert response.status_code == 200
    assert "uptime_seconds" in response.json()


async def test_request_id_header(async_client: AsyncClient):
    response = await async_client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["x-request-id"] == "abc123"


async def test_db_health_reports_schema_version(migrated_db, async_client: AsyncClient):
    response = await async_client.get("/api/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["database"]["available"] is True
    assert data["database"]["schema_version"] == "001"
