"""
License repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlmodel import select

from ..entities.enums import TIER_ORDER, LicenseTier, PaymentStatus
from ..entities.licenses import License
from .base import AsyncCrudRepository


class LicenseRepository(AsyncCrudRepository[License]):
    """Repository for license data access operations."""

    def __init__(self, session) -> None:
        super().__init__(session, License)

    async def get_by_key(self, license_key: str) -> Optional[License]:
        stmt = select(License).where(License.license_key == license_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def key_exists(self, license_key: str) -> bool:
        return await self.get_by_key(license_key) is not None

    async def get_by_stripe_payment_id(self, stripe_payment_id: str) -> Optional[License]:
        stmt = select(License).where(License.stripe_payment_id == stripe_payment_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_checkout_session(self, session_id: str) -> Optional[License]:
        """Find a license whose payment id or notes reference a checkout session."""
        stmt = select(License).where(
            or_(License.stripe_payment_id == session_id, License.notes.contains(session_id))
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_user(self, user_id: str) -> List[License]:
        stmt = select(License).where(License.user_id == user_id).order_by(License.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_valid_for_user(self, user_id: str, now: datetime) -> List[License]:
        """Active, completed and unexpired licenses of a user."""
        stmt = select(License).where(
            (License.user_id == user_id)
            & (License.is_active == True)  # noqa: E712
            & (License.payment_status == PaymentStatus.COMPLETED)
            & (or_(License.is_lifetime == True, License.valid_until.is_(None), License.valid_until > now))  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_highest_for_user(self, user_id: str, now: datetime) -> Optional[License]:
        licenses = await self.list_valid_for_user(user_id, now)
        if not licenses:
            return None
        return max(licenses, key=lambda lic: TIER_ORDER[lic.tier])

    async def stats(self) -> Dict[str, Any]:
        by_tier_stmt = select(License.tier, func.count()).group_by(License.tier)
        rows = (await self.session.execute(by_tier_stmt)).all()
        by_tier = {LicenseTier(tier).value: int(count) for tier, count in rows}

        active_stmt = select(func.count()).select_from(License).where(
            (License.is_active == True) & (License.payment_status == PaymentStatus.COMPLETED)  # noqa: E712
        )
        active = int((await self.session.execute(active_stmt)).scalar_one())

        revenue_stmt = select(func.coalesce(func.sum(License.amount_paid), 0)).where(
            License.payment_status == PaymentStatus.COMPLETED
        )
        revenue = int((await self.session.execute(revenue_stmt)).scalar_one())

        return {
            "total": sum(by_tier.values()),
            "active": active,
            "by_tier": {tier.value: by_tier.get(tier.value, 0) for tier in LicenseTier},
            "total_revenue": revenue,
        }
