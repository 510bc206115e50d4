"""
API tests for the public catalog: published components, code access, copies and assets.
"""

import pytest
from httpx import AsyncClient
from sqlmodel import select

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import (
    Asset,
    Component,
    ComponentStatus,
    ComponentVersion,
    CssFramework,
    FrameworkType,
    License,
    LicenseTier,
    PaymentStatus,
)

pytestmark = pytest.mark.asyncio


async def _component(session, subcategory_id: str, slug: str, is_free: bool, status=ComponentStatus.PUBLISHED):
    component = Component(
        subcategory_id=subcategory_id,
        name=slug.replace("-", " ").title(),
        slug=slug,
        is_free=is_free,
        required_tier=LicenseTier.PRO,
        status=status,
        published_at=utc_now() if status == ComponentStatus.PUBLISHED else None,
    )
    session.add(component)
    await session.flush()
    session.add(
        ComponentVersion(
            component_id=component.id,
            version_number="1.0.0",
            framework=FrameworkType.HTML,
            css_framework=CssFramework.TAILWIND_V4,
            code_preview="<section>preview</section>",
            code_full="<section>full</section>",
            is_default=True,
        )
    )
    await session.commit()
    return component


@pytest.fixture
async def components(session, catalog):
    subcategory_id = catalog["subcategory"].id
    return {
        "free": await _component(session, subcategory_id, "free-hero", is_free=True),
        "premium": await _component(session, subcategory_id, "premium-hero", is_free=False),
        "draft": await _component(session, subcategory_id, "draft-hero", is_free=True, status=ComponentStatus.DRAFT),
    }


@pytest.fixture
async def pro_license(session, regular_user):
    license = License(
        user_id=regular_user.id,
        license_key="ONA-AAAA-BBBB-CCCC",
        tier=LicenseTier.PRO,
        payment_status=PaymentStatus.COMPLETED,
        amount_paid=14900,
    )
    session.add(license)
    await session.commit()
    return license


class TestPublicListing:
    async def test_only_published_components_are_listed(self, client: AsyncClient, components):
        response = await client.get("/api/public/components")

        assert response.status_code == 200
        slugs = {item["slug"] for item in response.json()["data"]["items"]}
        assert slugs == {"free-hero", "premium-hero"}

    async def test_draft_detail_is_not_found(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['draft'].id}")

        assert response.status_code == 404

    async def test_categories_are_cacheable(self, client: AsyncClient, components):
        response = await client.get("/api/public/categories")

        assert response.status_code == 200
        assert response.headers["Cache-Control"].startswith("public, max-age=")


class TestCodeAccess:
    async def test_free_component_exposes_code(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['free'].id}")

        data = response.json()["data"]
        assert data["access"]["has_access"] is True
        assert data["default_version"]["code_full"] == "<section>full</section>"

    async def test_premium_component_hides_code_from_anonymous(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['premium'].id}")

        data = response.json()["data"]
        assert data["access"]["has_access"] is False
        assert data["access"]["requires_tier"] == "pro"
        assert data["default_version"]["code_preview"] == "<section>preview</section>"
        assert data["default_version"]["code_full"] is None

    async def test_detail_counts_views(self, client: AsyncClient, components):
        await client.get(f"/api/public/components/{components['free'].id}")
        response = await client.get(f"/api/public/components/{components['free'].id}")

        assert response.json()["data"]["view_count"] == 2

    async def test_pro_license_unlocks_premium_code(self, client: AsyncClient, components, pro_license, user_headers):
        response = await client.get(f"/api/public/components/{components['premium'].id}", headers=user_headers)

        data = response.json()["data"]
        assert data["access"]["has_access"] is True
        assert data["access"]["user_tier"] == "pro"
        assert data["default_version"]["code_full"] == "<section>full</section>"


class TestCopy:
    async def test_free_copy_is_counted(self, client: AsyncClient, components):
        response = await client.post(f"/api/public/components/{components['free'].id}/copy")

        assert response.status_code == 200
        assert response.json()["data"]["copy_count"] == 1

    async def test_premium_copy_requires_license(self, client: AsyncClient, components):
        response = await client.post(f"/api/public/components/{components['premium'].id}/copy")

        assert response.status_code == 402
        assert response.json()["error"]["code"] == "PREMIUM_REQUIRED"

    async def test_premium_copy_with_license(self, client: AsyncClient, components, pro_license, user_headers):
        response = await client.post(f"/api/public/components/{components['premium'].id}/copy", headers=user_headers)

        assert response.status_code == 200

    async def test_preview_renders_html(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['free'].id}/preview")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<section>full</section>" in response.text or "<section>preview</section>" in response.text


@pytest.fixture
async def free_assets(session, components):
    version = (
        await session.execute(select(ComponentVersion).where(ComponentVersion.component_id == components["free"].id))
    ).scalars().one()
    for name, mime_type, is_public in [
        ("hero.png", "image/png", True),
        ("demo.mp4", "video/mp4", True),
        ("styles.css", "text/css", True),
        ("source.zip", "application/zip", False),
    ]:
        session.add(
            Asset(
                path=f"components/free-hero/{name}",
                disk="fs",
                url=f"/uploads/components/free-hero/{name}",
                hash=name.ljust(64, "0")[:64],
                mime_type=mime_type,
                original_name=name,
                is_public=is_public,
                component_version_id=version.id,
            )
        )
    await session.commit()
    return version


class TestAssets:
    async def test_lists_public_assets_of_default_version(self, client: AsyncClient, components, free_assets):
        response = await client.get(f"/api/public/components/{components['free'].id}/assets")

        assert response.status_code == 200
        assert response.headers["cache-control"].startswith("public")
        data = response.json()["data"]
        assert data["version_id"] == free_assets.id
        assert data["total"] == 3
        assert data["by_type"] == {"image": 1, "video": 1, "asset": 1}
        assert {asset["original_name"] for asset in data["assets"]} == {"hero.png", "demo.mp4", "styles.css"}

    async def test_filter_by_type_as_urls(self, client: AsyncClient, components, free_assets):
        response = await client.get(
            f"/api/public/components/{components['free'].id}/assets", params={"type": "image", "format": "urls"}
        )

        assert response.json()["data"] == ["/uploads/components/free-hero/hero.png"]

    async def test_component_without_assets(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['premium'].id}/assets")

        data = response.json()["data"]
        assert data["total"] == 0
        assert data["assets"] == []

    async def test_draft_component_is_not_found(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['draft'].id}/assets")

        assert response.status_code == 404

    async def test_version_of_other_component(self, client: AsyncClient, components, free_assets):
        response = await client.get(
            f"/api/public/components/{components['premium'].id}/assets", params={"version_id": free_assets.id}
        )

        assert response.status_code == 404

    async def test_invalid_type(self, client: AsyncClient, components):
        response = await client.get(f"/api/public/components/{components['free'].id}/assets", params={"type": "font"})

        assert response.status_code == 422
