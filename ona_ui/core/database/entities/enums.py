"""
Enumerations shared by the database entities and the API schemas.
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AuthProvider(str, Enum):
    EMAIL = "email"
    GOOGLE = "google"
    GITHUB = "github"
    TWITTER = "twitter"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    DISPUTED = "disputed"


class LicenseTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    TEAM = "team"
    ENTERPRISE = "enterprise"


class ComponentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    DEPRECATED = "deprecated"


class FrameworkType(str, Enum):
    HTML = "html"
    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"
    ALPINE = "alpine"
    ANGULAR = "angular"


class CssFramework(str, Enum):
    TAILWIND_V3 = "tailwind_v3"
    TAILWIND_V4 = "tailwind_v4"
    VANILLA_CSS = "vanilla_css"


class AccessType(str, Enum):
    PREVIEW_ONLY = "preview_only"
    COPY = "copy"
    FULL_ACCESS = "full_access"
    DOWNLOAD = "download"


ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)

TIER_ORDER = {
    LicenseTier.FREE: 1,
    LicenseTier.PRO: 2,
    LicenseTier.TEAM: 3,
    LicenseTier.ENTERPRISE: 4,
}
