"""
Asset metadata repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select

from ..entities.assets import Asset
from .base import AsyncCrudRepository


class AssetRepository(AsyncCrudRepository[Asset]):
    """Repository for uploaded asset records."""

    def __init__(self, session) -> None:
        super().__init__(session, Asset)

    async def get_by_hash(self, content_hash: str) -> Optional[Asset]:
        stmt = select(Asset).where(Asset.hash == content_hash).order_by(Asset.created_at)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_path(self, path: str) -> Optional[Asset]:
        stmt = select(Asset).where(Asset.path == path)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_version(self, version_id: str) -> List[Asset]:
        stmt = select(Asset).where(Asset.component_version_id == version_id).order_by(Asset.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_path(self, path: str) -> int:
        stmt = select(Asset).where(Asset.path == path)
        assets = list((await self.session.execute(stmt)).scalars().all())
        for asset in assets:
            await self.session.delete(asset)
        await self.session.commit()
        return len(assets)

    async def total_size(self) -> int:
        stmt = select(func.coalesce(func.sum(Asset.size), 0))
        return int((await self.session.execute(stmt)).scalar_one())
