"""
User Service.

Profiles, permissions, subscription summary and the per-user dashboard.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import LicenseTier, PaymentStatus, User
from ona_ui.core.database.repositories import LicenseRepository, UserRepository
from ona_ui.core.errors import ConflictError, NotFoundError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.utils import generate_slug, name_from_email

logger = get_logger(__name__)

MAX_API_CALLS = {
    LicenseTier.FREE: 100,
    LicenseTier.PRO: 1000,
    LicenseTier.TEAM: 5000,
    LicenseTier.ENTERPRISE: 50000,
}


class UserService:
    """Service for user accounts and what they are entitled to."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.licenses = LicenseRepository(session)

    async def get_user(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None or user.is_deleted:
            raise NotFoundError("User", user_id)
        return user

    async def get_or_create_by_email(self, email: str, name: Optional[str] = None) -> tuple[User, bool]:
        """Return ``(user, created)`` for an email, creating the account when unknown."""
        email = email.strip().lower()
        existing = await self.users.get_by_email(email)
        if existing is not None:
            return existing, False
        display_name = name or name_from_email(email)
        user = User(
            email=email,
            name=display_name,
            full_name=display_name,
            username=await self.generate_unique_username(email.split("@", 1)[0]),
        )
        user = await self.users.create(user)
        logger.info(f"Created user {user.id} for {email}")
        return user, True

    async def generate_unique_username(self, base: str) -> str:
        """``slug``, then ``slug-1``, ``slug-2``... until one is free."""
        slug = generate_slug(base)[:45] or "user"
        candidate = slug
        suffix = 1
        while await self.users.username_exists(candidate):
            candidate = f"{slug}-{suffix}"
            suffix += 1
        return candidate

    async def update_profile(self, user_id: str, changes: Dict[str, Any]) -> User:
        user = await self.get_user(user_id)
        username = changes.get("username")
        if username and username != user.username and await self.users.username_exists(username):
            raise ConflictError("Username is already taken", details={"username": username})
        for field, value in changes.items():
            setattr(user, field, value)
        return await self.users.update(user)

    async def update_last_login(self, user: User) -> User:
        return await self.users.update_last_login(user)

    async def get_subscription(self, user_id: str) -> Dict[str, Any]:
        highest = await self.licenses.get_highest_for_user(user_id, utc_now())
        if highest is None:
            return {"has_active_subscription": False, "tier": None, "team_seats": None, "used_seats": None}
        return {
            "has_active_subscription": True,
            "tier": highest.tier,
            "team_seats": highest.seats_allowed,
            "used_seats": highest.seats_used,
        }

    async def get_permissions(self, user: User) -> Dict[str, Any]:
        subscription = await self.get_subscription(user.id)
        tier = subscription["tier"] or LicenseTier.FREE
        is_admin = user.is_admin
        return {
            "can_access_premium": subscription["has_active_subscription"],
            "can_manage_components": is_admin,
            "can_manage_categories": is_admin,
            "can_manage_users": is_admin,
            "can_manage_licenses": is_admin,
            "max_api_calls": MAX_API_CALLS[tier],
        }

    async def get_stats(self, user: User) -> Dict[str, Any]:
        licenses = await self.licenses.list_by_user(user.id)
        now = utc_now()
        return {
            "total_licenses": len(licenses),
            "active_licenses": sum(1 for lic in licenses if lic.is_valid_at(now)),
            "total_spent": sum(lic.amount_paid for lic in licenses if lic.payment_status == PaymentStatus.COMPLETED),
            "member_since": user.created_at,
            "last_login_at": user.last_login_at,
        }

    async def get_dashboard(self, user: User) -> Dict[str, Any]:
        return {
            "user": user,
            "subscription": await self.get_subscription(user.id),
            "permissions": await self.get_permissions(user),
            "licenses": await self.licenses.list_by_user(user.id),
            "stats": await self.get_stats(user),
        }
