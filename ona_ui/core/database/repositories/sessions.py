"""
Session and magic-link verification repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlmodel import select

from ..entities.sessions import UserSession, Verification
from .base import AsyncCrudRepository


class UserSessionRepository(AsyncCrudRepository[UserSession]):
    """Repository for authenticated sessions."""

    def __init__(self, session) -> None:
        super().__init__(session, UserSession)

    async def get_by_token(self, token: str) -> Optional[UserSession]:
        stmt = select(UserSession).where(UserSession.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_token(self, token: str) -> bool:
        existing = await self.get_by_token(token)
        if existing is None:
            return False
        await self.session.delete(existing)
        await self.session.commit()
        return True

    async def delete_expired(self, now: datetime) -> int:
        result = await self.session.execute(delete(UserSession).where(UserSession.expires_at <= now))
        await self.session.commit()
        return result.rowcount or 0


class VerificationRepository(AsyncCrudRepository[Verification]):
    """Repository for pending magic-link tokens."""

    def __init__(self, session) -> None:
        super().__init__(session, Verification)

    async def get_by_value(self, value: str) -> Optional[Verification]:
        stmt = select(Verification).where(Verification.value == value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_for_identifier(self, identifier: str) -> None:
        """Invalidate every pending link of an email before issuing a new one."""
        await self.session.execute(delete(Verification).where(Verification.identifier == identifier))
        await self.session.commit()
