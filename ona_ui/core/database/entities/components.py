"""
Component and component version entity models.

A component is a catalog entry; each of its versions is a concrete
implementation for one framework and one CSS framework. At most one version
of a component is flagged ``is_default``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Numeric, Text, UniqueConstraint
from sqlmodel import Field

from ..base import Base, EnumValue, new_id, utc_now
from .enums import AccessType, ComponentStatus, CssFramework, FrameworkType, LicenseTier


class ComponentBase(Base):
    """Base fields for a catalog component."""

    subcategory_id: str = Field(foreign_key="subcategories.id", index=True, max_length=36)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None)

    # Access
    is_free: bool = Field(default=False)
    required_tier: LicenseTier = Field(default=LicenseTier.PRO, sa_type=EnumValue(LicenseTier))
    access_type: AccessType = Field(default=AccessType.PREVIEW_ONLY, sa_type=EnumValue(AccessType))

    status: ComponentStatus = Field(default=ComponentStatus.DRAFT, sa_type=EnumValue(ComponentStatus))
    is_new: bool = Field(default=False)
    is_featured: bool = Field(default=False)

    # Marketing
    conversion_rate: Optional[float] = Field(default=None, sa_type=Numeric(5, 2, asdecimal=False))
    tested_companies: List[str] = Field(default_factory=list, sa_type=JSON)
    preview_image_large: Optional[str] = Field(default=None)
    preview_image_small: Optional[str] = Field(default=None)
    preview_video_url: Optional[str] = Field(default=None)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)

    sort_order: int = Field(default=0)


class Component(ComponentBase, table=True):
    """Persistent catalog component.

    Table: components
    """

    __tablename__ = "components"
    __table_args__ = (
        UniqueConstraint("subcategory_id", "slug", name="uq_components_subcategory_slug"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)

    view_count: int = Field(default=0)
    copy_count: int = Field(default=0)
    published_at: Optional[datetime] = Field(default=None)
    archived_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Component(slug={self.slug}, status={self.status})"


class ComponentVersionBase(Base):
    """Base fields for a component version."""

    component_id: str = Field(foreign_key="components.id", index=True, max_length=36)
    version_number: str = Field(max_length=20)
    framework: FrameworkType = Field(sa_type=EnumValue(FrameworkType))
    css_framework: CssFramework = Field(sa_type=EnumValue(CssFramework))

    # Code
    code_preview: Optional[str] = Field(default=None, sa_type=Text)
    code_full: Optional[str] = Field(default=None, sa_type=Text)
    code_encrypted: Optional[str] = Field(default=None, sa_type=Text)

    # Technical metadata
    dependencies: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    config_required: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    # Dark mode
    supports_dark_mode: bool = Field(default=False)
    dark_mode_code: Optional[str] = Field(default=None, sa_type=Text)

    # Integrations
    integrations: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    integration_code: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    # Multi-file components
    files: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    is_default: bool = Field(default=False)


class ComponentVersion(ComponentVersionBase, table=True):
    """Persistent component version.

    Table: component_versions
    """

    __tablename__ = "component_versions"
    __table_args__ = (
        UniqueConstraint(
            "component_id",
            "framework",
            "css_framework",
            "version_number",
            name="uq_component_versions_variant",
        ),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return (
            f"ComponentVersion(component={self.component_id}, {self.framework}/{self.css_framework} "
            f"v{self.version_number}, default={self.is_default})"
        )
