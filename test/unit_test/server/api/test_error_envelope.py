"""
API tests for the error envelope returned by every failure path.
"""

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

pytestmark = pytest.mark.asyncio


async def test_unknown_route_uses_envelope(client: AsyncClient):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["error"]["message"] == "Route GET /api/does-not-exist not found"
    assert "timestamp" in body


async def test_validation_error_lists_fields(client: AsyncClient, admin_headers):
    response = await client.post("/api/admin/categories", json={"name": ""}, headers=admin_headers)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Request validation failed"
    assert any(detail["field"] == "body.name" for detail in error["details"])


async def test_service_error_uses_its_code(client: AsyncClient):
    response = await client.get("/api/public/categories/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


async def test_unhandled_exception_returns_internal_error(session):
    from ona_ui.server.main import app

    router = APIRouter()

    @router.get("/api/_boom")
    async def boom():
        raise RuntimeError("boom")

    app.include_router(router)
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
            response = await raw_client.get("/api/_boom")
    finally:
        app.router.routes = [route for route in app.router.routes if getattr(route, "path", None) != "/api/_boom"]

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert error["message"] == "Internal server error"
    assert error["details"]["error_type"] == "RuntimeError"
