"""
Component Service.

Catalog component management and the access rules that decide what a
visitor may see or copy.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import (
    AccessType,
    Asset,
    Component,
    ComponentStatus,
    ComponentVersion,
    LicenseTier,
    User,
)
from ona_ui.core.database.repositories import (
    AssetRepository,
    ComponentFilters,
    ComponentRepository,
    ComponentVersionRepository,
    LicenseRepository,
    Page,
    SubcategoryRepository,
)
from ona_ui.core.errors import ConflictError, NotFoundError, PremiumRequiredError, ValidationError
from ona_ui.core.logging_config import get_logger

from .catalog import batch_summary, check_batch_action, resolve_slug
from .component_versions import filter_sensitive
from .files import FileService
from .licenses import tier_satisfies
from .preview import compile_version

logger = get_logger(__name__)

HIGH_CONVERSION_THRESHOLD = 5.0
RECOMMENDATION_LIMIT = 4
# images above this size become the large preview
LARGE_PREVIEW_IMAGE_SIZE = 500_000
ASSET_TYPES = ("image", "video", "asset")

COPIED_VERSION_FIELDS = (
    "version_number",
    "framework",
    "css_framework",
    "code_preview",
    "code_full",
    "code_encrypted",
    "dependencies",
    "config_required",
    "supports_dark_mode",
    "dark_mode_code",
    "integrations",
    "integration_code",
    "files",
    "is_default",
)


def asset_type(mime_type: str) -> str:
    major = mime_type.split("/", 1)[0]
    return major if major in ("image", "video") else "asset"


def stamp_status(component: Component, status: ComponentStatus) -> None:
    """Set ``status`` and the publication/archival timestamps that go with it."""
    now = utc_now()
    if status == ComponentStatus.PUBLISHED and component.published_at is None:
        component.published_at = now
    if status == ComponentStatus.ARCHIVED and component.status != ComponentStatus.ARCHIVED:
        component.archived_at = now
    component.status = status


class ComponentService:
    """Service for catalog components."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.components = ComponentRepository(session)
        self.versions = ComponentVersionRepository(session)
        self.subcategories = SubcategoryRepository(session)
        self.licenses = LicenseRepository(session)

    async def get_component(self, component_id: str) -> Component:
        component = await self.components.get_by_id(component_id)
        if component is None:
            raise NotFoundError("Component", component_id)
        return component

    async def list_components(
        self, filters: ComponentFilters, page: int, limit: int, sort: Optional[str] = None
    ) -> Page[Component]:
        return await self.components.search(filters, page, limit, sort)

    async def get_featured(self, limit: int) -> List[Component]:
        filters = ComponentFilters(status=ComponentStatus.PUBLISHED, is_featured=True)
        return await self.components.find(filters, limit, "newest")

    async def get_popular(self, limit: int) -> List[Component]:
        return await self.components.find(ComponentFilters(status=ComponentStatus.PUBLISHED), limit, "popular")

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------

    async def get_access_info(self, component: Component, user: Optional[User]) -> Dict[str, Any]:
        """What ``user`` (``None`` for anonymous visitors) may do with ``component``."""
        if component.is_free:
            return {
                "has_access": True,
                "access_type": AccessType.FULL_ACCESS,
                "can_view_code": True,
                "can_copy": True,
                "can_download": True,
                "requires_tier": None,
                "user_tier": None,
            }

        denied = {
            "has_access": False,
            "access_type": AccessType.PREVIEW_ONLY,
            "can_view_code": False,
            "can_copy": False,
            "can_download": False,
            "requires_tier": component.required_tier,
            "user_tier": None,
        }
        if user is None:
            return denied

        license = await self.licenses.get_highest_for_user(user.id, utc_now())
        user_tier: Optional[LicenseTier] = license.tier if license else None
        if not tier_satisfies(user_tier, component.required_tier):
            return {**denied, "user_tier": user_tier}

        return {
            "has_access": True,
            "access_type": AccessType.FULL_ACCESS,
            "can_view_code": True,
            "can_copy": True,
            "can_download": True,
            "requires_tier": component.required_tier,
            "user_tier": user_tier,
        }

    async def get_public_detail(self, component_id: str, user: Optional[User]) -> Dict[str, Any]:
        """Published component with access info and its default version; counts a view."""
        component = await self.get_component(component_id)
        if component.status != ComponentStatus.PUBLISHED:
            raise NotFoundError("Component", component_id)
        await self.components.increment_counter(component.id, "view_count")
        await self.session.refresh(component)
        access = await self.get_access_info(component, user)
        default = await self.versions.get_default(component.id)
        return {
            **component.model_dump(),
            "access": access,
            "default_version": filter_sensitive(default, access["has_access"]) if default else None,
        }

    async def get_public_versions(self, component_id: str, user: Optional[User]) -> List[Dict[str, Any]]:
        component = await self.get_component(component_id)
        if component.status != ComponentStatus.PUBLISHED:
            raise NotFoundError("Component", component_id)
        access = await self.get_access_info(component, user)
        versions = await self.versions.list_by_component(component.id)
        return [filter_sensitive(version, access["has_access"]) for version in versions]

    async def record_copy(self, component_id: str, user: Optional[User]) -> Dict[str, Any]:
        """Count a copy of the component code.

        Raises:
            PremiumRequiredError: Non-free component and the user lacks a sufficient license.
        """
        component = await self.get_component(component_id)
        access = await self.get_access_info(component, user)
        if not component.is_free and not access["can_copy"]:
            raise PremiumRequiredError(
                f"A {component.required_tier.value} license is required to copy this component",
                details={"required_tier": component.required_tier.value},
            )
        await self.components.increment_counter(component.id, "copy_count")
        await self.session.refresh(component)
        return {"component_id": component.id, "copy_count": component.copy_count}

    async def get_preview_html(self, component_id: str) -> str:
        component = await self.get_component(component_id)
        default = await self.versions.get_default(component.id)
        if default is None:
            raise NotFoundError("Default version of component", component_id)
        return compile_version(default, title=component.name)

    async def get_public_assets(
        self, component_id: str, version_id: Optional[str] = None, kind: Optional[str] = None
    ) -> Dict[str, Any]:
        """Public assets of a version of a published component, the default version unless one is named.

        Raises:
            NotFoundError: Unknown or unpublished component, or a version of another component.
        """
        component = await self.get_component(component_id)
        if component.status != ComponentStatus.PUBLISHED:
            raise NotFoundError("Component", component_id)
        if version_id:
            version = await self.versions.get_for_component(component.id, version_id)
            if version is None:
                raise NotFoundError("Component version", version_id)
        else:
            version = await self.versions.get_default(component.id)

        assets: List[Asset] = []
        if version is not None:
            stored = await AssetRepository(self.session).list_for_version(version.id)
            assets = [asset for asset in stored if asset.is_public]
        if kind and kind != "all":
            assets = [asset for asset in assets if asset_type(asset.mime_type) == kind]

        by_type = {name: 0 for name in ASSET_TYPES}
        for asset in assets:
            by_type[asset_type(asset.mime_type)] += 1
        return {
            "component_id": component.id,
            "version_id": version.id if version is not None else None,
            "assets": assets,
            "total": len(assets),
            "by_type": by_type,
        }

    async def get_recommendations(self, component_id: str) -> Dict[str, List[Component]]:
        component = await self.get_component(component_id)
        published = ComponentStatus.PUBLISHED
        return {
            "similar": await self.components.find(
                ComponentFilters(subcategory_id=component.subcategory_id, status=published, exclude_id=component.id),
                RECOMMENDATION_LIMIT,
                "popular",
            ),
            "trending": await self.components.find(
                ComponentFilters(status=published, exclude_id=component.id), RECOMMENDATION_LIMIT, "popular"
            ),
            "new": await self.components.find(
                ComponentFilters(status=published, is_new=True, exclude_id=component.id),
                RECOMMENDATION_LIMIT,
                "newest",
            ),
            "high_conversion": await self.components.list_high_conversion(
                HIGH_CONVERSION_THRESHOLD, RECOMMENDATION_LIMIT, exclude_id=component.id
            ),
        }

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def create_component(self, data: Dict[str, Any]) -> Component:
        subcategory_id = data["subcategory_id"]
        if await self.subcategories.get_by_id(subcategory_id) is None:
            raise NotFoundError("Subcategory", subcategory_id)

        slug = resolve_slug(data["name"], data.get("slug"))
        if await self.components.slug_exists(subcategory_id, slug):
            raise ConflictError(f"Slug '{slug}' is already used in this subcategory", details={"slug": slug})

        fields = {key: value for key, value in data.items() if key not in ("slug", "sort_order", "status")}
        component = Component(**fields, slug=slug)
        sort_order = data.get("sort_order")
        component.sort_order = (
            sort_order if sort_order is not None else await self.components.count_for_subcategory(subcategory_id) + 1
        )
        stamp_status(component, ComponentStatus(data.get("status") or ComponentStatus.DRAFT))
        component = await self.components.create(component)
        logger.info(f"Created component {component.slug} ({component.id})")
        return component

    async def update_component(self, component_id: str, changes: Dict[str, Any]) -> Component:
        component = await self.get_component(component_id)
        subcategory_id = changes.get("subcategory_id", component.subcategory_id)
        if subcategory_id != component.subcategory_id and await self.subcategories.get_by_id(subcategory_id) is None:
            raise NotFoundError("Subcategory", subcategory_id)

        new_slug = changes.pop("slug", None) or component.slug
        if new_slug != component.slug or subcategory_id != component.subcategory_id:
            new_slug = resolve_slug(component.name, new_slug)
            if await self.components.slug_exists(subcategory_id, new_slug, exclude_id=component.id):
                raise ConflictError(f"Slug '{new_slug}' is already used in this subcategory")
            changes["slug"] = new_slug

        status = changes.pop("status", None)
        for field, value in changes.items():
            setattr(component, field, value)
        if status is not None:
            stamp_status(component, ComponentStatus(status))
        return await self.components.update(component)

    async def change_status(self, component_id: str, status: ComponentStatus) -> Component:
        component = await self.get_component(component_id)
        stamp_status(component, status)
        component = await self.components.update(component)
        logger.info(f"Component {component.id} status changed to {status.value}")
        return component

    async def delete_component(self, component_id: str) -> None:
        if not await self.components.delete_with_versions(component_id):
            raise NotFoundError("Component", component_id)
        logger.info(f"Deleted component {component_id} and its versions")

    async def _free_copy_slug(self, subcategory_id: str, slug: str) -> str:
        candidate = f"{slug}-copy"
        suffix = 1
        while await self.components.slug_exists(subcategory_id, candidate):
            candidate = f"{slug}-copy-{suffix}"
            suffix += 1
        return candidate

    async def duplicate(self, component_id: str) -> Component:
        """Copy a component as a draft, together with all of its versions."""
        source = await self.get_component(component_id)
        data = source.model_dump(
            exclude={
                "id",
                "slug",
                "name",
                "status",
                "is_new",
                "view_count",
                "copy_count",
                "published_at",
                "archived_at",
                "created_at",
                "updated_at",
                "sort_order",
            }
        )
        copy = Component(
            **data,
            name=f"{source.name} (copy)",
            slug=await self._free_copy_slug(source.subcategory_id, source.slug),
            status=ComponentStatus.DRAFT,
            is_new=True,
            sort_order=await self.components.count_for_subcategory(source.subcategory_id) + 1,
        )
        copy = await self.components.create(copy)

        # Default first so the copied default keeps its flag
        versions = sorted(await self.versions.list_by_component(source.id), key=lambda v: not v.is_default)
        for version in versions:
            fields = {field: getattr(version, field) for field in COPIED_VERSION_FIELDS}
            await self.versions.create(ComponentVersion(component_id=copy.id, **fields))
        logger.info(f"Duplicated component {source.id} into {copy.id} with {len(versions)} versions")
        return copy

    async def attach_preview_files(
        self,
        component_id: str,
        uploads: Sequence[Tuple[bytes, str, str]],
        files: FileService,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Store preview media given as ``(data, file name, MIME type)`` and link it on the component.

        An image above ``LARGE_PREVIEW_IMAGE_SIZE`` bytes becomes ``preview_image_large``,
        a smaller one ``preview_image_small``; a video becomes ``preview_video_url``.

        Raises:
            NotFoundError: Unknown component.
            ValidationError: No files, or a file that is neither an image nor a video.
        """
        component = await self.get_component(component_id)
        if not uploads:
            raise ValidationError("No files provided")
        for _, name, mime_type in uploads:
            if asset_type(mime_type) == "asset":
                raise ValidationError(f"{name} is neither an image nor a video", details={"mime_type": mime_type})

        folder = f"components/{component.slug}"
        stored = []
        for data, name, mime_type in uploads:
            if asset_type(mime_type) == "image":
                uploaded = await files.upload_image(data, name, mime_type, user_id=user_id, folder=f"{folder}/images")
                field = "preview_image_large" if uploaded.size > LARGE_PREVIEW_IMAGE_SIZE else "preview_image_small"
            else:
                uploaded = await files.upload_video(data, name, mime_type, user_id=user_id, folder=f"{folder}/videos")
                field = "preview_video_url"
            setattr(component, field, uploaded.url)
            stored.append(uploaded)

        component = await self.components.update(component)
        logger.info(f"Attached {len(stored)} preview files to component {component.id}")
        return {
            "preview_image_large": component.preview_image_large,
            "preview_image_small": component.preview_image_small,
            "preview_video_url": component.preview_video_url,
            "files": stored,
        }

    async def get_stats(self, component_id: str) -> Dict[str, Any]:
        component = await self.get_component(component_id)
        rows = await self.versions.stats_by_variant(component.id)
        by_framework: Dict[str, int] = {}
        for framework, _css, count in rows:
            by_framework[framework.value] = by_framework.get(framework.value, 0) + count
        return {
            "component_id": component.id,
            "view_count": component.view_count,
            "copy_count": component.copy_count,
            "version_count": sum(by_framework.values()),
            "versions_by_framework": by_framework,
            "conversion_rate": component.conversion_rate,
        }

    async def batch(self, action: str, ids: Sequence[str]) -> Dict[str, Any]:
        """``activate`` publishes, ``deactivate`` archives, ``delete`` removes with versions."""
        check_batch_action(action)
        succeeded: List[str] = []
        failed: List[Dict[str, str]] = []
        for component_id in ids:
            try:
                if action == "delete":
                    await self.delete_component(component_id)
                else:
                    status = ComponentStatus.PUBLISHED if action == "activate" else ComponentStatus.ARCHIVED
                    await self.change_status(component_id, status)
                succeeded.append(component_id)
            except NotFoundError as e:
                failed.append({"id": component_id, "error": e.message})
        logger.info(f"Component batch '{action}': {len(succeeded)} succeeded, {len(failed)} failed")
        return batch_summary(action, succeeded, failed)
