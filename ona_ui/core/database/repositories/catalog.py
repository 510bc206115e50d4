"""
Catalog hierarchy repositories: products, categories and subcategories.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, update
from sqlmodel import select

from ..base import utc_now
from ..entities.catalog import Category, Product, Subcategory
from .base import AsyncCrudRepository, Page, QueryBuilder


class ProductRepository(AsyncCrudRepository[Product]):
    """Repository for product lines."""

    def __init__(self, session) -> None:
        super().__init__(session, Product)

    async def get_by_slug(self, slug: str) -> Optional[Product]:
        stmt = select(Product).where(Product.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(self) -> List[Product]:
        stmt = select(Product).where(Product.is_active == True).order_by(Product.sort_order)  # noqa: E712
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


async def _reorder(session, model, ids: Sequence[str]) -> None:
    """Assign ``sort_order`` 1..n following ``ids`` and commit once."""
    now = utc_now()
    try:
        for position, entity_id in enumerate(ids, start=1):
            await session.execute(
                update(model).where(model.id == entity_id).values(sort_order=position, updated_at=now)
            )
        await session.commit()
    except Exception:
        await session.rollback()
        raise


class CategoryRepository(AsyncCrudRepository[Category]):
    """Repository for categories."""

    def __init__(self, session) -> None:
        super().__init__(session, Category)

    async def get_by_slug(self, slug: str, product_id: Optional[str] = None) -> Optional[Category]:
        stmt = select(Category).where(Category.slug == slug)
        if product_id:
            stmt = stmt.where(Category.product_id == product_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def slug_exists(self, product_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Category.id).where((Category.product_id == product_id) & (Category.slug == slug))
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_by_product(self, product_id: Optional[str] = None, active_only: bool = False) -> List[Category]:
        stmt = select(Category)
        if product_id:
            stmt = stmt.where(Category.product_id == product_id)
        if active_only:
            stmt = stmt.where(Category.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Category.sort_order, Category.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids(self, ids: Sequence[str]) -> List[Category]:
        if not ids:
            return []
        result = await self.session.execute(select(Category).where(Category.id.in_(list(ids))))
        return list(result.scalars().all())

    async def search(
        self,
        page: int,
        limit: int,
        product_id: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Page[Category]:
        stmt = select(Category)
        stmt = QueryBuilder.apply_filters(stmt, Category, {"product_id": product_id, "is_active": is_active})
        if search:
            stmt = stmt.where(func.lower(Category.name).like(f"%{search.lower()}%"))
        stmt = QueryBuilder.apply_sort(stmt, Category, sort_by, sort_order, default=Category.sort_order)
        return await self.paginate(stmt, page, limit)

    async def count_for_product(self, product_id: str) -> int:
        return await self.count({"product_id": product_id})

    async def reorder(self, ids: Sequence[str]) -> None:
        await _reorder(self.session, Category, ids)


class SubcategoryRepository(AsyncCrudRepository[Subcategory]):
    """Repository for subcategories."""

    def __init__(self, session) -> None:
        super().__init__(session, Subcategory)

    async def get_by_slug(self, slug: str, category_id: Optional[str] = None) -> Optional[Subcategory]:
        stmt = select(Subcategory).where(Subcategory.slug == slug)
        if category_id:
            stmt = stmt.where(Subcategory.category_id == category_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def slug_exists(self, category_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Subcategory.id).where((Subcategory.category_id == category_id) & (Subcategory.slug == slug))
        if exclude_id:
            stmt = stmt.where(Subcategory.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_by_category(self, category_id: str, active_only: bool = False) -> List[Subcategory]:
        stmt = select(Subcategory).where(Subcategory.category_id == category_id)
        if active_only:
            stmt = stmt.where(Subcategory.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Subcategory.sort_order, Subcategory.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_categories(self, category_ids: Sequence[str], active_only: bool = False) -> List[Subcategory]:
        if not category_ids:
            return []
        stmt = select(Subcategory).where(Subcategory.category_id.in_(list(category_ids)))
        if active_only:
            stmt = stmt.where(Subcategory.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Subcategory.sort_order, Subcategory.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search(
        self,
        page: int,
        limit: int,
        category_id: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Page[Subcategory]:
        stmt = select(Subcategory)
        stmt = QueryBuilder.apply_filters(stmt, Subcategory, {"category_id": category_id, "is_active": is_active})
        if search:
            stmt = stmt.where(func.lower(Subcategory.name).like(f"%{search.lower()}%"))
        stmt = QueryBuilder.apply_sort(stmt, Subcategory, sort_by, sort_order, default=Subcategory.sort_order)
        return await self.paginate(stmt, page, limit)

    async def count_by_category(self) -> Dict[str, int]:
        stmt = select(Subcategory.category_id, func.count()).group_by(Subcategory.category_id)
        rows = (await self.session.execute(stmt)).all()
        return {category_id: int(count) for category_id, count in rows}

    async def count_for_category(self, category_id: str) -> int:
        return await self.count({"category_id": category_id})

    async def reorder(self, ids: Sequence[str]) -> None:
        await _reorder(self.session, Subcategory, ids)
