"""
Health check endpoint tests.
"""

from httpx import AsyncClient


async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ready_check(client: AsyncClient):
    """Ready endpoint should run a query against the database."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/orgs/{orgId}/memberships" in data["endpoints"]


async def test_security_headers_without_admin_key(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert "X-Content-Type-Options" in response.headers
