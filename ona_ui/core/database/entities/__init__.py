"""
Database entity models organized by table.

Importing this package registers every table on ``Base.metadata``.
"""

from .assets import Asset
from .catalog import Category, Product, Subcategory
from .components import Component, ComponentVersion
from .enums import (
    ADMIN_ROLES,
    TIER_ORDER,
    AccessType,
    AuthProvider,
    ComponentStatus,
    CssFramework,
    FrameworkType,
    LicenseTier,
    PaymentStatus,
    UserRole,
)
from .licenses import License
from .sessions import UserSession, Verification
from .users import Account, User

__all__ = [
    "ADMIN_ROLES",
    "TIER_ORDER",
    "AccessType",
    "Account",
    "Asset",
    "AuthProvider",
    "Category",
    "Component",
    "ComponentStatus",
    "ComponentVersion",
    "CssFramework",
    "FrameworkType",
    "License",
    "LicenseTier",
    "PaymentStatus",
    "Product",
    "Subcategory",
    "User",
    "UserRole",
    "UserSession",
    "Verification",
]
