import httpx
import pytest
from httpx import AsyncClient

from app.main import app


@pytest.mark.asyncio
async def test_health_ok():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health", headers={"X-Request-ID": "req-123"})
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["db"] == "ok"
        assert data["request_id"] == "req-123"
        assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_version_and_generated_request_id():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/version")
        assert r.status_code == 200
        assert r.json()["name"] == "skatehubba-api"
        assert r.json()["display_name"] == "SkateHubba"
        assert r.headers["x-request-id"]
