"""
Component and component version repositories.

The version repository owns the "one default version per component"
invariant: every operation that touches ``is_default`` clears the previous
default and sets the new one in the same transaction, committing once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, update
from sqlmodel import select

from ..base import utc_now
from ..entities.assets import Asset
from ..entities.catalog import Subcategory
from ..entities.components import Component, ComponentVersion
from ..entities.enums import ComponentStatus, CssFramework, FrameworkType
from .base import AsyncCrudRepository, Page


@dataclass
class ComponentFilters:
    """Filters accepted by the component listing endpoints."""

    subcategory_id: Optional[str] = None
    category_id: Optional[str] = None
    is_free: Optional[bool] = None
    status: Optional[ComponentStatus] = None
    is_new: Optional[bool] = None
    is_featured: Optional[bool] = None
    search: Optional[str] = None
    exclude_id: Optional[str] = None


SORT_OPTIONS = ("newest", "popular", "conversion", "name")


class ComponentRepository(AsyncCrudRepository[Component]):
    """Repository for catalog components."""

    def __init__(self, session) -> None:
        super().__init__(session, Component)

    async def get_by_slug(self, slug: str, subcategory_id: Optional[str] = None) -> Optional[Component]:
        stmt = select(Component).where(Component.slug == slug)
        if subcategory_id:
            stmt = stmt.where(Component.subcategory_id == subcategory_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def slug_exists(self, subcategory_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Component.id).where((Component.subcategory_id == subcategory_id) & (Component.slug == slug))
        if exclude_id:
            stmt = stmt.where(Component.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def count_for_subcategory(self, subcategory_id: str, status: Optional[ComponentStatus] = None) -> int:
        return await self.count({"subcategory_id": subcategory_id, "status": status})

    def _filtered(self, filters: ComponentFilters):
        stmt = select(Component)
        if filters.category_id:
            stmt = stmt.join(Subcategory, Subcategory.id == Component.subcategory_id).where(
                Subcategory.category_id == filters.category_id
            )
        if filters.subcategory_id:
            stmt = stmt.where(Component.subcategory_id == filters.subcategory_id)
        if filters.is_free is not None:
            stmt = stmt.where(Component.is_free == filters.is_free)
        if filters.status is not None:
            stmt = stmt.where(Component.status == filters.status)
        if filters.is_new is not None:
            stmt = stmt.where(Component.is_new == filters.is_new)
        if filters.is_featured is not None:
            stmt = stmt.where(Component.is_featured == filters.is_featured)
        if filters.search:
            stmt = stmt.where(func.lower(Component.name).like(f"%{filters.search.lower()}%"))
        if filters.exclude_id:
            stmt = stmt.where(Component.id != filters.exclude_id)
        return stmt

    @staticmethod
    def _ordered(stmt, sort: Optional[str]):
        if sort == "popular":
            return stmt.order_by(Component.view_count.desc(), Component.created_at.desc())
        if sort == "conversion":
            return stmt.order_by(Component.conversion_rate.desc().nulls_last(), Component.created_at.desc())
        if sort == "name":
            return stmt.order_by(Component.name.asc())
        return stmt.order_by(Component.created_at.desc())

    async def search(self, filters: ComponentFilters, page: int, limit: int, sort: Optional[str] = None) -> Page[Component]:
        stmt = self._ordered(self._filtered(filters), sort)
        return await self.paginate(stmt, page, limit)

    async def find(self, filters: ComponentFilters, limit: int, sort: Optional[str] = None) -> List[Component]:
        stmt = self._ordered(self._filtered(filters), sort).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_high_conversion(self, min_rate: float, limit: int, exclude_id: Optional[str] = None) -> List[Component]:
        filters = ComponentFilters(status=ComponentStatus.PUBLISHED, exclude_id=exclude_id)
        stmt = self._filtered(filters).where(Component.conversion_rate >= min_rate)
        stmt = self._ordered(stmt, "conversion").limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def increment_counter(self, component_id: str, field: str) -> None:
        """Atomically add one to ``view_count`` or ``copy_count``."""
        column = getattr(Component, field)
        await self.session.execute(
            update(Component).where(Component.id == component_id).values({field: column + 1})
        )
        await self.session.commit()

    async def count_by_status(self) -> Dict[str, int]:
        stmt = select(Component.status, func.count()).group_by(Component.status)
        rows = (await self.session.execute(stmt)).all()
        counts = {status.value: 0 for status in ComponentStatus}
        for status, count in rows:
            counts[ComponentStatus(status).value] = int(count)
        return counts

    async def count_by_subcategory(self, status: Optional[ComponentStatus] = None) -> Dict[str, int]:
        stmt = select(Component.subcategory_id, func.count())
        if status is not None:
            stmt = stmt.where(Component.status == status)
        stmt = stmt.group_by(Component.subcategory_id)
        rows = (await self.session.execute(stmt)).all()
        return {subcategory_id: int(count) for subcategory_id, count in rows}

    async def totals(self) -> Dict[str, int]:
        stmt = select(
            func.count(),
            func.coalesce(func.sum(Component.view_count), 0),
            func.coalesce(func.sum(Component.copy_count), 0),
        ).select_from(Component)
        count, views, copies = (await self.session.execute(stmt)).one()
        return {"components": int(count), "views": int(views), "copies": int(copies)}

    async def delete_with_versions(self, component_id: str) -> bool:
        """Delete a component, its versions and their asset records in one transaction."""
        component = await self.get_by_id(component_id)
        if component is None:
            return False
        try:
            version_ids = select(ComponentVersion.id).where(ComponentVersion.component_id == component_id)
            await self.session.execute(delete(Asset).where(Asset.component_version_id.in_(version_ids)))
            await self.session.execute(delete(ComponentVersion).where(ComponentVersion.component_id == component_id))
            await self.session.delete(component)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True


class ComponentVersionRepository(AsyncCrudRepository[ComponentVersion]):
    """Repository for component versions and their default flag."""

    def __init__(self, session) -> None:
        super().__init__(session, ComponentVersion)

    async def list_by_component(
        self,
        component_id: str,
        framework: Optional[FrameworkType] = None,
        css_framework: Optional[CssFramework] = None,
    ) -> List[ComponentVersion]:
        stmt = select(ComponentVersion).where(ComponentVersion.component_id == component_id)
        if framework is not None:
            stmt = stmt.where(ComponentVersion.framework == framework)
        if css_framework is not None:
            stmt = stmt.where(ComponentVersion.css_framework == css_framework)
        stmt = stmt.order_by(ComponentVersion.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_component(self, component_id: str, version_id: str) -> Optional[ComponentVersion]:
        stmt = select(ComponentVersion).where(
            (ComponentVersion.id == version_id) & (ComponentVersion.component_id == component_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_default(self, component_id: str) -> Optional[ComponentVersion]:
        stmt = select(ComponentVersion).where(
            (ComponentVersion.component_id == component_id) & (ComponentVersion.is_default == True)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_variant(
        self,
        component_id: str,
        framework: FrameworkType,
        css_framework: CssFramework,
        version_number: str,
    ) -> Optional[ComponentVersion]:
        stmt = select(ComponentVersion).where(
            (ComponentVersion.component_id == component_id)
            & (ComponentVersion.framework == framework)
            & (ComponentVersion.css_framework == css_framework)
            & (ComponentVersion.version_number == version_number)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_component(self, component_id: str) -> int:
        return await self.count({"component_id": component_id})

    async def count_defaults(self, component_id: str) -> int:
        return await self.count({"component_id": component_id, "is_default": True})

    async def list_version_numbers(self, component_id: str) -> List[str]:
        stmt = select(ComponentVersion.version_number).where(ComponentVersion.component_id == component_id)
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]

    async def _clear_defaults(self, component_id: str, keep_id: Optional[str] = None) -> None:
        stmt = update(ComponentVersion).where(
            (ComponentVersion.component_id == component_id) & (ComponentVersion.is_default == True)  # noqa: E712
        )
        if keep_id:
            stmt = stmt.where(ComponentVersion.id != keep_id)
        await self.session.execute(stmt.values(is_default=False, updated_at=utc_now()))

    async def create(self, version: ComponentVersion) -> ComponentVersion:
        """Insert a version; clearing the other defaults happens in the same transaction.

        The first version of a component always becomes its default.
        """
        try:
            if not version.is_default and await self.count_for_component(version.component_id) == 0:
                version.is_default = True
            if version.is_default:
                await self._clear_defaults(version.component_id)
            self.session.add(version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(version)
        return version

    async def update(self, version: ComponentVersion) -> ComponentVersion:
        """Persist changes to a version, keeping a single default per component."""
        try:
            if version.is_default:
                await self._clear_defaults(version.component_id, keep_id=version.id)
            version.updated_at = utc_now()
            self.session.add(version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(version)
        return version

    async def set_default(self, version: ComponentVersion) -> ComponentVersion:
        """Make ``version`` the only default of its component (clear then set, one commit)."""
        try:
            await self._clear_defaults(version.component_id, keep_id=version.id)
            version.is_default = True
            version.updated_at = utc_now()
            self.session.add(version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(version)
        return version

    async def delete_version(self, version: ComponentVersion) -> Optional[ComponentVersion]:
        """Delete ``version``; when it was the default, promote the most recent remaining one.

        Returns:
            The promoted version, if any.
        """
        promoted: Optional[ComponentVersion] = None
        try:
            await self.session.execute(delete(Asset).where(Asset.component_version_id == version.id))
            was_default = version.is_default
            await self.session.delete(version)
            await self.session.flush()
            if was_default:
                stmt = (
                    select(ComponentVersion)
                    .where(ComponentVersion.component_id == version.component_id)
                    .order_by(ComponentVersion.created_at.desc())
                    .limit(1)
                )
                promoted = (await self.session.execute(stmt)).scalars().first()
                if promoted is not None:
                    promoted.is_default = True
                    promoted.updated_at = utc_now()
                    self.session.add(promoted)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return promoted

    async def stats_by_variant(self, component_id: Optional[str] = None) -> List[Tuple[Any, Any, int]]:
        """Count versions grouped by (framework, css_framework)."""
        stmt = select(ComponentVersion.framework, ComponentVersion.css_framework, func.count())
        if component_id:
            stmt = stmt.where(ComponentVersion.component_id == component_id)
        stmt = stmt.group_by(ComponentVersion.framework, ComponentVersion.css_framework)
        rows = (await self.session.execute(stmt)).all()
        return [(FrameworkType(framework), CssFramework(css), int(count)) for framework, css, count in rows]

    async def count_for_components(self, component_ids: Sequence[str]) -> Dict[str, int]:
        if not component_ids:
            return {}
        stmt = (
            select(ComponentVersion.component_id, func.count())
            .where(ComponentVersion.component_id.in_(list(component_ids)))
            .group_by(ComponentVersion.component_id)
        )
        rows = (await self.session.execute(stmt)).all()
        return {component_id: int(count) for component_id, count in rows}
