import pytest
from httpx import AsyncClient

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"
    assert body["data"]["database"] == "connected"


async def test_info(client: AsyncClient):
    response = await client.get("/api/info")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Ona UI API"
    assert data["endpoints"]["admin"] == "/api/admin"


async def test_process_time_header(client: AsyncClient):
    response = await client.get("/api/info")
    assert float(response.headers["X-Process-Time"]) >= 0
