"""
User, license and authentication I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from ona_ui.core.database.entities.enums import (
    AuthProvider,
    CssFramework,
    FrameworkType,
    LicenseTier,
    PaymentStatus,
    UserRole,
)


class UserRead(BaseModel):
    """Public profile of a user."""

    id: str
    email: str
    name: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    image: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    email_verified: bool
    provider: AuthProvider
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    preferred_framework: FrameworkType
    preferred_css: CssFramework
    dark_mode_default: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, min_length=3, max_length=50, pattern=r"^[a-z0-9_-]+$")
    full_name: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = None
    company: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    preferred_framework: Optional[FrameworkType] = None
    preferred_css: Optional[CssFramework] = None
    dark_mode_default: Optional[bool] = None


class LicenseRead(BaseModel):
    id: str
    user_id: str
    license_key: str
    tier: LicenseTier
    stripe_payment_id: Optional[str] = None
    amount_paid: int
    currency: str
    payment_status: PaymentStatus
    seats_allowed: int
    seats_used: int
    valid_from: datetime
    valid_until: Optional[datetime] = None
    is_lifetime: bool
    is_active: bool
    is_early_bird: bool
    discount_percentage: int
    created_at: datetime

    class Config:
        from_attributes = True


class Permissions(BaseModel):
    can_access_premium: bool
    can_manage_components: bool
    can_manage_categories: bool
    can_manage_users: bool
    can_manage_licenses: bool
    max_api_calls: int


class SubscriptionInfo(BaseModel):
    has_active_subscription: bool
    tier: Optional[LicenseTier] = None
    team_seats: Optional[int] = None
    used_seats: Optional[int] = None


class UserStats(BaseModel):
    total_licenses: int
    active_licenses: int
    total_spent: int
    member_since: datetime
    last_login_at: Optional[datetime] = None


class UserDashboard(BaseModel):
    user: UserRead
    subscription: SubscriptionInfo
    permissions: Permissions
    licenses: List[LicenseRead]
    stats: UserStats


class LicenseValidation(BaseModel):
    is_valid: bool
    license: Optional[LicenseRead] = None
    reason: Optional[str] = None


class MagicLinkRequest(BaseModel):
    email: EmailStr
    callback_url: Optional[str] = Field(default=None, description="Frontend path to land on after sign-in")


class SessionInfo(BaseModel):
    user: UserRead
    expires_at: datetime
    token: Optional[str] = Field(default=None, description="Only returned when the session is created")
