"""
API tests for the signed-in user's account endpoints.
"""

import pytest
from httpx import AsyncClient

from ona_ui.core.database.entities import License, LicenseTier, PaymentStatus

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def licenses(session, regular_user):
    rows = [
        License(
            user_id=regular_user.id,
            license_key="ONA-1111-2222-3333",
            tier=LicenseTier.TEAM,
            payment_status=PaymentStatus.COMPLETED,
            amount_paid=49900,
            seats_allowed=5,
            seats_used=2,
        ),
        License(
            user_id=regular_user.id,
            license_key="ONA-4444-5555-6666",
            tier=LicenseTier.PRO,
            payment_status=PaymentStatus.PENDING,
            amount_paid=14900,
        ),
    ]
    session.add_all(rows)
    await session.commit()
    return rows


async def test_requires_session(client: AsyncClient):
    response = await client.get("/api/user/profile")

    assert response.status_code == 401


class TestProfile:
    async def test_get_profile(self, client: AsyncClient, regular_user, user_headers):
        response = await client.get("/api/user/profile", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["data"]["email"] == regular_user.email

    async def test_update_profile(self, client: AsyncClient, user_headers):
        response = await client.put(
            "/api/user/profile",
            json={"username": "member", "preferred_framework": "vue", "company": "Acme"},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "member"
        assert data["preferred_framework"] == "vue"

    async def test_taken_username_conflicts(self, client: AsyncClient, session, admin_user, user_headers):
        admin_user.username = "boss"
        await session.commit()

        response = await client.put("/api/user/profile", json={"username": "boss"}, headers=user_headers)

        assert response.status_code == 409

    async def test_invalid_username(self, client: AsyncClient, user_headers):
        response = await client.put("/api/user/profile", json={"username": "Not Valid"}, headers=user_headers)

        assert response.status_code == 422


class TestEntitlements:
    async def test_free_user_subscription(self, client: AsyncClient, user_headers):
        response = await client.get("/api/user/subscription", headers=user_headers)

        assert response.json()["data"] == {
            "has_active_subscription": False,
            "tier": None,
            "team_seats": None,
            "used_seats": None,
        }

    async def test_subscription_uses_highest_completed_license(self, client: AsyncClient, licenses, user_headers):
        response = await client.get("/api/user/subscription", headers=user_headers)

        data = response.json()["data"]
        assert data["tier"] == "team"
        assert data["team_seats"] == 5
        assert data["used_seats"] == 2

    async def test_permissions(self, client: AsyncClient, licenses, user_headers):
        response = await client.get("/api/user/permissions", headers=user_headers)

        data = response.json()["data"]
        assert data["can_access_premium"] is True
        assert data["can_manage_components"] is False
        assert data["max_api_calls"] == 5000

    async def test_admin_permissions(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/user/permissions", headers=admin_headers)

        data = response.json()["data"]
        assert data["can_manage_components"] is True
        assert data["can_access_premium"] is False

    async def test_stats_count_completed_payments(self, client: AsyncClient, licenses, user_headers):
        response = await client.get("/api/user/stats", headers=user_headers)

        data = response.json()["data"]
        assert data["total_licenses"] == 2
        assert data["active_licenses"] == 1
        assert data["total_spent"] == 49900

    async def test_dashboard(self, client: AsyncClient, licenses, user_headers):
        response = await client.get("/api/user/dashboard", headers=user_headers)

        data = response.json()["data"]
        assert len(data["licenses"]) == 2
        assert data["subscription"]["tier"] == "team"
        assert data["permissions"]["can_access_premium"] is True
