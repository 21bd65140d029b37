"""Health endpoint tests."""

import pytest

from notekeep import __version__


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health is open, reports the version and a reachable database."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["version"] == __version__
