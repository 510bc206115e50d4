"""
API tests for admin uploads and file management.
"""

import base64
import hashlib

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

PNG = b"\x89PNG\r\n\x1a\n" + b"1" * 32


async def upload_png(client: AsyncClient, headers, name: str = "hero.png"):
    return await client.post(
        "/api/admin/files/images",
        files={"file": (name, PNG, "image/png")},
        data={"folder": "previews"},
        headers=headers,
    )


async def test_uploads_require_admin(client: AsyncClient, user_headers):
    response = await upload_png(client, user_headers)

    assert response.status_code == 403


class TestImages:
    async def test_upload_image(self, client: AsyncClient, admin_headers):
        response = await upload_png(client, admin_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["path"].startswith("previews/hero-")
        assert data["mime_type"] == "image/png"
        assert data["deduplicated"] is False

    async def test_duplicate_upload_is_deduplicated(self, client: AsyncClient, admin_headers):
        first = await upload_png(client, admin_headers)
        second = await upload_png(client, admin_headers, "again.png")

        assert second.json()["data"]["deduplicated"] is True
        assert second.json()["data"]["path"] == first.json()["data"]["path"]

    async def test_wrong_type(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/admin/files/images",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_info_and_delete(self, client: AsyncClient, admin_headers):
        path = (await upload_png(client, admin_headers)).json()["data"]["path"]

        info = await client.get("/api/admin/files/info", params={"path": path}, headers=admin_headers)
        deleted = await client.delete("/api/admin/files", params={"path": path}, headers=admin_headers)
        again = await client.delete("/api/admin/files", params={"path": path}, headers=admin_headers)

        assert info.json()["data"]["exists"] is True
        assert info.json()["data"]["size"] == len(PNG)
        assert deleted.status_code == 200
        assert again.status_code == 404


class TestBatchUpload:
    async def test_batch_upload(self, client: AsyncClient, admin_headers):
        content = b"body { color: red; }"
        payload = {
            "files": [
                {
                    "path": "dist/styles.css",
                    "content": base64.b64encode(content).decode(),
                    "hash": hashlib.sha256(content).hexdigest(),
                    "shared": True,
                },
                {
                    "path": "dist/broken.css",
                    "content": base64.b64encode(b"x").decode(),
                    "hash": "0" * 64,
                    "category": "marketing",
                    "component_number": 1,
                },
            ]
        }

        response = await client.post("/api/admin/files/batch-upload", json=payload, headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["total_uploaded"] == 1
        assert body["data"]["uploaded_assets"][0]["path"] == "shared/assets/styles.css"
        assert body["data"]["errors"][0].startswith("dist/broken.css: ")
        assert body["message"] == "Uploaded 1 assets, skipped 0, 1 failed"

    async def test_empty_batch_is_invalid(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/admin/files/batch-upload", json={"files": []}, headers=admin_headers)

        assert response.status_code == 422
