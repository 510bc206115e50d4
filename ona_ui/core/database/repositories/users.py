"""
User and account repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import select

from ..base import utc_now
from ..entities.enums import UserRole
from ..entities.users import Account, User
from .base import AsyncCrudRepository, Page, QueryBuilder


class UserRepository(AsyncCrudRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by email, soft-deleted users included."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        return await self.get_by_username(username) is not None

    async def update_last_login(self, user: User, when: Optional[datetime] = None) -> User:
        user.last_login_at = when or utc_now()
        return await self.update(user)

    async def count_active(self) -> int:
        stmt = select(func.count()).select_from(User).where(User.deleted_at.is_(None))
        return int((await self.session.execute(stmt)).scalar_one())

    async def search(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "desc",
    ) -> Page[User]:
        stmt = select(User).where(User.deleted_at.is_(None))
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(func.lower(User.email).like(pattern), func.lower(User.name).like(pattern)))
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = QueryBuilder.apply_sort(stmt, User, sort_by, sort_order, default=User.created_at.desc())
        return await self.paginate(stmt, page, limit)


class AccountRepository(AsyncCrudRepository[Account]):
    """Repository for the sign-in methods of users."""

    def __init__(self, session) -> None:
        super().__init__(session, Account)

    async def get_for_provider(self, user_id: str, provider_id: str) -> Optional[Account]:
        stmt = select(Account).where((Account.user_id == user_id) & (Account.provider_id == provider_id))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def ensure(self, user_id: str, provider_id: str, account_id: str) -> Account:
        """Return the user's account for ``provider_id``, creating it when missing."""
        existing = await self.get_for_provider(user_id, provider_id)
        if existing is not None:
            return existing
        return await self.create(Account(user_id=user_id, provider_id=provider_id, account_id=account_id))
