"""
Catalog Service.

Business rules for categories and subcategories: slug generation and
uniqueness, ordering, navigation tree, statistics, export and batch updates.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.entities import Category, ComponentStatus, Subcategory
from ona_ui.core.database.repositories import (
    CategoryRepository,
    ComponentRepository,
    ComponentVersionRepository,
    LicenseRepository,
    Page,
    ProductRepository,
    SubcategoryRepository,
    UserRepository,
)
from ona_ui.core.errors import ConflictError, NotFoundError, ValidationError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.utils import generate_slug, is_valid_slug

logger = get_logger(__name__)

BATCH_ACTIONS = ("activate", "deactivate", "delete")


def resolve_slug(name: str, slug: Optional[str]) -> str:
    """Use ``slug`` when given, otherwise derive it from ``name``; reject bad formats."""
    resolved = slug if slug else generate_slug(name)
    if not is_valid_slug(resolved):
        raise ValidationError(
            "Slug must contain lowercase letters, digits and single dashes only", details={"slug": resolved}
        )
    return resolved


def check_batch_action(action: str) -> None:
    if action not in BATCH_ACTIONS:
        raise ValidationError(f"Unknown batch action '{action}'", details={"allowed": list(BATCH_ACTIONS)})


def batch_summary(action: str, succeeded: List[str], failed: List[Dict[str, str]]) -> Dict[str, Any]:
    return {
        "action": action,
        "succeeded": succeeded,
        "failed": failed,
        "success_count": len(succeeded),
        "error_count": len(failed),
    }


class CategoryService:
    """Service for categories and catalog-wide views."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)
        self.subcategories = SubcategoryRepository(session)
        self.components = ComponentRepository(session)

    async def list_categories(
        self,
        page: int,
        limit: int,
        product_id: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Page[Category]:
        return await self.categories.search(page, limit, product_id, search, is_active, sort_by, sort_order)

    async def get_category(self, category_id: str) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def get_category_by_slug(self, slug: str) -> Category:
        category = await self.categories.get_by_slug(slug)
        if category is None:
            raise NotFoundError("Category", slug)
        return category

    async def get_with_subcategories(self, category: Category, active_only: bool = False) -> Dict[str, Any]:
        """Category payload with its subcategories and their component counts."""
        subcategories = await self.subcategories.list_by_category(category.id, active_only=active_only)
        status = ComponentStatus.PUBLISHED if active_only else None
        counts = await self.components.count_by_subcategory(status)
        return {
            **category.model_dump(),
            "subcategories": [
                {**sub.model_dump(), "component_count": counts.get(sub.id, 0)} for sub in subcategories
            ],
        }

    async def _default_product_id(self) -> str:
        products = await self.products.list_active()
        if not products:
            raise ValidationError("No active product exists, product_id is required")
        return products[0].id

    async def create_category(self, data: Dict[str, Any]) -> Category:
        product_id = data.get("product_id") or await self._default_product_id()
        if await self.products.get_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)

        slug = resolve_slug(data["name"], data.get("slug"))
        if await self.categories.slug_exists(product_id, slug):
            raise ConflictError(f"Slug '{slug}' is already used by another category", details={"slug": slug})

        sort_order = data.get("sort_order")
        if sort_order is None:
            sort_order = await self.categories.count_for_product(product_id) + 1

        category = Category(
            product_id=product_id,
            name=data["name"],
            slug=slug,
            description=data.get("description"),
            icon_name=data.get("icon_name"),
            sort_order=sort_order,
            is_active=data.get("is_active", True),
        )
        category = await self.categories.create(category)
        logger.info(f"Created category {category.slug} ({category.id})")
        return category

    async def update_category(self, category_id: str, changes: Dict[str, Any]) -> Category:
        category = await self.get_category(category_id)
        new_slug = changes.pop("slug", None)
        if new_slug is not None and new_slug != category.slug:
            new_slug = resolve_slug(category.name, new_slug)
            if await self.categories.slug_exists(category.product_id, new_slug, exclude_id=category.id):
                raise ConflictError(f"Slug '{new_slug}' is already used by another category")
            changes["slug"] = new_slug
        for field, value in changes.items():
            setattr(category, field, value)
        return await self.categories.update(category)

    async def delete_category(self, category_id: str) -> None:
        category = await self.get_category(category_id)
        if await self.subcategories.count_for_category(category.id) > 0:
            raise ConflictError(
                "Category still has subcategories; delete or move them first", details={"category_id": category.id}
            )
        await self.categories.delete(category.id)
        logger.info(f"Deleted category {category.slug} ({category.id})")

    async def reorder(self, ids: Sequence[str]) -> None:
        found = {category.id for category in await self.categories.list_by_ids(ids)}
        missing = [entity_id for entity_id in ids if entity_id not in found]
        if missing:
            raise NotFoundError("Category", ", ".join(missing))
        await self.categories.reorder(ids)

    async def check_slug(self, slug: str, product_id: Optional[str] = None, exclude_id: Optional[str] = None) -> bool:
        if not is_valid_slug(slug):
            return False
        product_id = product_id or await self._default_product_id()
        return not await self.categories.slug_exists(product_id, slug, exclude_id)

    async def get_navigation(self) -> Dict[str, Any]:
        """Active categories with their active subcategories and published component counts."""
        categories = await self.categories.list_by_product(active_only=True)
        subcategories = await self.subcategories.list_by_categories([c.id for c in categories], active_only=True)
        counts = await self.components.count_by_subcategory(ComponentStatus.PUBLISHED)

        by_category: Dict[str, List[Subcategory]] = {}
        for sub in subcategories:
            by_category.setdefault(sub.category_id, []).append(sub)

        tree = []
        total = 0
        for category in categories:
            children = []
            for sub in by_category.get(category.id, []):
                count = counts.get(sub.id, 0)
                total += count
                children.append({"id": sub.id, "name": sub.name, "slug": sub.slug, "component_count": count})
            tree.append(
                {
                    "id": category.id,
                    "name": category.name,
                    "slug": category.slug,
                    "icon_name": category.icon_name,
                    "subcategories": children,
                }
            )
        return {"categories": tree, "total_components": total}

    async def get_detailed_stats(self) -> List[Dict[str, Any]]:
        categories = await self.categories.list_by_product()
        sub_counts = await self.subcategories.count_by_category()
        all_subs = await self.subcategories.list_by_categories([c.id for c in categories])
        component_counts = await self.components.count_by_subcategory()
        published_counts = await self.components.count_by_subcategory(ComponentStatus.PUBLISHED)

        stats = []
        for category in categories:
            sub_ids = [sub.id for sub in all_subs if sub.category_id == category.id]
            stats.append(
                {
                    "id": category.id,
                    "name": category.name,
                    "slug": category.slug,
                    "subcategory_count": sub_counts.get(category.id, 0),
                    "component_count": sum(component_counts.get(sub_id, 0) for sub_id in sub_ids),
                    "published_component_count": sum(published_counts.get(sub_id, 0) for sub_id in sub_ids),
                }
            )
        return stats

    async def get_global_stats(self) -> Dict[str, Any]:
        totals = await self.components.totals()
        license_stats = await LicenseRepository(self.session).stats()
        return {
            "total_categories": await self.categories.count(),
            "total_subcategories": await self.subcategories.count(),
            "total_components": totals["components"],
            "components_by_status": await self.components.count_by_status(),
            "total_versions": await ComponentVersionRepository(self.session).count(),
            "total_views": totals["views"],
            "total_copies": totals["copies"],
            "total_users": await UserRepository(self.session).count_active(),
            "active_licenses": license_stats["active"],
            "total_revenue": license_stats["total_revenue"],
        }

    async def export(self) -> List[Dict[str, Any]]:
        categories = await self.categories.list_by_product()
        subcategories = await self.subcategories.list_by_categories([c.id for c in categories])
        return [
            {
                **category.model_dump(mode="json"),
                "subcategories": [
                    sub.model_dump(mode="json") for sub in subcategories if sub.category_id == category.id
                ],
            }
            for category in categories
        ]

    async def batch(self, action: str, ids: Sequence[str]) -> Dict[str, Any]:
        check_batch_action(action)
        succeeded: List[str] = []
        failed: List[Dict[str, str]] = []
        for category_id in ids:
            try:
                if action == "delete":
                    await self.delete_category(category_id)
                else:
                    await self.update_category(category_id, {"is_active": action == "activate"})
                succeeded.append(category_id)
            except (NotFoundError, ConflictError) as e:
                failed.append({"id": category_id, "error": e.message})
        logger.info(f"Category batch '{action}': {len(succeeded)} succeeded, {len(failed)} failed")
        return batch_summary(action, succeeded, failed)


class SubcategoryService:
    """Service for subcategories."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.categories = CategoryRepository(session)
        self.subcategories = SubcategoryRepository(session)
        self.components = ComponentRepository(session)

    async def list_subcategories(
        self,
        page: int,
        limit: int,
        category_id: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Page[Subcategory]:
        return await self.subcategories.search(page, limit, category_id, search, is_active, sort_by, sort_order)

    async def get_subcategory(self, subcategory_id: str) -> Subcategory:
        subcategory = await self.subcategories.get_by_id(subcategory_id)
        if subcategory is None:
            raise NotFoundError("Subcategory", subcategory_id)
        return subcategory

    async def create_subcategory(self, data: Dict[str, Any]) -> Subcategory:
        category_id = data["category_id"]
        if await self.categories.get_by_id(category_id) is None:
            raise NotFoundError("Category", category_id)

        slug = resolve_slug(data["name"], data.get("slug"))
        if await self.subcategories.slug_exists(category_id, slug):
            raise ConflictError(f"Slug '{slug}' is already used in this category", details={"slug": slug})

        sort_order = data.get("sort_order")
        if sort_order is None:
            sort_order = await self.subcategories.count_for_category(category_id) + 1

        subcategory = Subcategory(
            category_id=category_id,
            name=data["name"],
            slug=slug,
            description=data.get("description"),
            sort_order=sort_order,
            is_active=data.get("is_active", True),
        )
        subcategory = await self.subcategories.create(subcategory)
        logger.info(f"Created subcategory {subcategory.slug} ({subcategory.id})")
        return subcategory

    async def update_subcategory(self, subcategory_id: str, changes: Dict[str, Any]) -> Subcategory:
        subcategory = await self.get_subcategory(subcategory_id)
        new_slug = changes.pop("slug", None)
        if new_slug is not None and new_slug != subcategory.slug:
            new_slug = resolve_slug(subcategory.name, new_slug)
            if await self.subcategories.slug_exists(subcategory.category_id, new_slug, exclude_id=subcategory.id):
                raise ConflictError(f"Slug '{new_slug}' is already used in this category")
            changes["slug"] = new_slug
        for field, value in changes.items():
            setattr(subcategory, field, value)
        return await self.subcategories.update(subcategory)

    async def delete_subcategory(self, subcategory_id: str) -> None:
        subcategory = await self.get_subcategory(subcategory_id)
        if await self.components.count_for_subcategory(subcategory.id) > 0:
            raise ConflictError(
                "Subcategory still has components; delete or move them first",
                details={"subcategory_id": subcategory.id},
            )
        await self.subcategories.delete(subcategory.id)
        logger.info(f"Deleted subcategory {subcategory.slug} ({subcategory.id})")

    async def move(self, subcategory_id: str, target_category_id: str) -> Subcategory:
        subcategory = await self.get_subcategory(subcategory_id)
        if await self.categories.get_by_id(target_category_id) is None:
            raise NotFoundError("Category", target_category_id)
        if subcategory.category_id == target_category_id:
            return subcategory
        if await self.subcategories.slug_exists(target_category_id, subcategory.slug):
            raise ConflictError(
                f"Slug '{subcategory.slug}' is already used in the target category",
                details={"slug": subcategory.slug, "category_id": target_category_id},
            )
        subcategory.category_id = target_category_id
        subcategory.sort_order = await self.subcategories.count_for_category(target_category_id) + 1
        subcategory = await self.subcategories.update(subcategory)
        logger.info(f"Moved subcategory {subcategory.id} to category {target_category_id}")
        return subcategory

    async def reorder(self, ids: Sequence[str]) -> None:
        for subcategory_id in ids:
            await self.get_subcategory(subcategory_id)
        await self.subcategories.reorder(ids)

    async def check_slug(self, slug: str, category_id: str, exclude_id: Optional[str] = None) -> bool:
        if not is_valid_slug(slug):
            return False
        return not await self.subcategories.slug_exists(category_id, slug, exclude_id)

    async def batch(self, action: str, ids: Sequence[str]) -> Dict[str, Any]:
        check_batch_action(action)
        succeeded: List[str] = []
        failed: List[Dict[str, str]] = []
        for subcategory_id in ids:
            try:
                if action == "delete":
                    await self.delete_subcategory(subcategory_id)
                else:
                    await self.update_subcategory(subcategory_id, {"is_active": action == "activate"})
                succeeded.append(subcategory_id)
            except (NotFoundError, ConflictError) as e:
                failed.append({"id": subcategory_id, "error": e.message})
        logger.info(f"Subcategory batch '{action}': {len(succeeded)} succeeded, {len(failed)} failed")
        return batch_summary(action, succeeded, failed)
