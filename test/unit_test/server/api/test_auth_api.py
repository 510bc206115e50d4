"""
API tests for magic-link sign-in, the current session and sign-out.
"""

from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from ona_ui.core.database.base import utc_now
from ona_ui.server.api.auth import MAGIC_LINK_SENT_MESSAGE
from ona_ui.server.services.auth import AuthService

pytestmark = pytest.mark.asyncio


async def magic_token(session, email: str) -> str:
    url = await AuthService(session).issue_magic_link(email)
    return parse_qs(urlparse(url).query)["token"][0]


class TestMagicLink:
    async def test_same_answer_for_known_and_unknown_emails(self, client: AsyncClient, regular_user):
        known = await client.post("/api/auth/magic-link", json={"email": regular_user.email})
        unknown = await client.post("/api/auth/magic-link", json={"email": "stranger@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"] == MAGIC_LINK_SENT_MESSAGE

    async def test_invalid_email(self, client: AsyncClient):
        response = await client.post("/api/auth/magic-link", json={"email": "not-an-email"})

        assert response.status_code == 422

    async def test_verify_sets_session_cookie(self, client: AsyncClient, session, regular_user):
        token = await magic_token(session, regular_user.email)

        response = await client.get("/api/auth/magic-link/verify", params={"token": token})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == regular_user.email
        assert data["token"]
        assert "ona-ui.session_token" in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()

    async def test_verify_unknown_token(self, client: AsyncClient):
        response = await client.get("/api/auth/magic-link/verify", params={"token": "forged"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"


class TestSession:
    async def test_anonymous_session_is_null(self, client: AsyncClient):
        response = await client.get("/api/auth/session")

        assert response.status_code == 200
        assert response.json()["data"] is None

    async def test_bearer_session(self, client: AsyncClient, regular_user, user_headers):
        response = await client.get("/api/auth/session", headers=user_headers)

        data = response.json()["data"]
        assert data["user"]["id"] == regular_user.id
        assert data["token"] is None

    async def test_sign_out_ends_session(self, client: AsyncClient, regular_user, user_headers):
        response = await client.post("/api/auth/sign-out", headers=user_headers)
        after = await client.get("/api/auth/session", headers=user_headers)

        assert response.status_code == 200
        assert after.json()["data"] is None

    async def test_sign_out_without_session(self, client: AsyncClient):
        response = await client.post("/api/auth/sign-out")

        assert response.status_code == 200

    async def test_deleted_account_session_is_null(self, client: AsyncClient, session, regular_user, user_headers):
        regular_user.deleted_at = utc_now()
        session.add(regular_user)
        await session.commit()

        response = await client.get("/api/auth/session", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["data"] is None
