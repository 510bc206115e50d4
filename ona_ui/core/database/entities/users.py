"""
User entity models.

This module contains the database entities for user accounts and the
sign-in methods (accounts) attached to them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, EnumValue, new_id, utc_now
from .enums import AuthProvider, CssFramework, FrameworkType, UserRole


class UserBase(Base):
    """Base fields for a user account."""

    email: str = Field(max_length=255, unique=True, index=True, description="Login email address")
    name: Optional[str] = Field(default=None, max_length=255, description="Display name")
    username: Optional[str] = Field(default=None, max_length=50, unique=True, description="Public handle")
    full_name: Optional[str] = Field(default=None, max_length=255)
    image: Optional[str] = Field(default=None, description="Avatar provided by the auth provider")
    avatar_url: Optional[str] = Field(default=None)

    role: UserRole = Field(default=UserRole.USER, sa_type=EnumValue(UserRole))
    email_verified: bool = Field(default=False)
    email_verified_at: Optional[datetime] = Field(default=None)
    provider: AuthProvider = Field(default=AuthProvider.EMAIL, sa_type=EnumValue(AuthProvider))
    provider_id: Optional[str] = Field(default=None, max_length=255)

    # Profile
    company: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None)

    # Preferences
    preferred_framework: FrameworkType = Field(default=FrameworkType.REACT, sa_type=EnumValue(FrameworkType))
    preferred_css: CssFramework = Field(default=CssFramework.TAILWIND_V4, sa_type=EnumValue(CssFramework))
    dark_mode_default: bool = Field(default=False)

    last_login_at: Optional[datetime] = Field(default=None)


class User(UserBase, table=True):
    """Persistent user account.

    Rows are soft deleted through ``deleted_at``; a deleted account keeps its
    licenses but can no longer reach the admin surface.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
    deleted_at: Optional[datetime] = Field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"User(email={self.email}, role={self.role})"


class Account(Base, table=True):
    """A sign-in method linked to a user (email magic link, OAuth provider).

    Table: accounts
    """

    __tablename__ = "accounts"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    account_id: str = Field(max_length=255, description="Identifier of the user at the provider")
    provider_id: str = Field(max_length=50, description="Provider name (email, google, github...)")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
