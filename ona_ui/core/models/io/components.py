"""
Component and component version I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ona_ui.core.database.entities.enums import (
    AccessType,
    ComponentStatus,
    CssFramework,
    FrameworkType,
    LicenseTier,
)

from .files import AssetRead, UploadedFile


class ComponentRead(BaseModel):
    """Schema for reading a component."""

    id: str
    subcategory_id: str
    name: str
    slug: str
    description: Optional[str] = None
    is_free: bool
    required_tier: LicenseTier
    access_type: AccessType
    status: ComponentStatus
    is_new: bool
    is_featured: bool
    conversion_rate: Optional[float] = None
    tested_companies: List[str] = Field(default_factory=list)
    preview_image_large: Optional[str] = None
    preview_image_small: Optional[str] = None
    preview_video_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    sort_order: int
    view_count: int
    copy_count: int
    published_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComponentCreate(BaseModel):
    """Schema for creating a component. ``slug`` is derived from ``name`` when omitted."""

    subcategory_id: str
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    is_free: bool = False
    required_tier: LicenseTier = LicenseTier.PRO
    access_type: AccessType = AccessType.PREVIEW_ONLY
    status: ComponentStatus = ComponentStatus.DRAFT
    is_new: bool = True
    is_featured: bool = False
    conversion_rate: Optional[float] = Field(default=None, ge=0, le=100)
    tested_companies: List[str] = Field(default_factory=list)
    preview_image_large: Optional[str] = None
    preview_image_small: Optional[str] = None
    preview_video_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    sort_order: Optional[int] = Field(default=None, ge=0)


class ComponentUpdate(BaseModel):
    subcategory_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    is_free: Optional[bool] = None
    required_tier: Optional[LicenseTier] = None
    access_type: Optional[AccessType] = None
    status: Optional[ComponentStatus] = None
    is_new: Optional[bool] = None
    is_featured: Optional[bool] = None
    conversion_rate: Optional[float] = Field(default=None, ge=0, le=100)
    tested_companies: Optional[List[str]] = None
    preview_image_large: Optional[str] = None
    preview_image_small: Optional[str] = None
    preview_video_url: Optional[str] = None
    tags: Optional[List[str]] = None
    sort_order: Optional[int] = Field(default=None, ge=0)


class ComponentStatusUpdate(BaseModel):
    status: ComponentStatus


class AccessInfo(BaseModel):
    """What the current caller may do with a component."""

    has_access: bool
    access_type: AccessType
    can_view_code: bool
    can_copy: bool
    can_download: bool
    requires_tier: Optional[LicenseTier] = None
    user_tier: Optional[LicenseTier] = None


class ComponentDetail(ComponentRead):
    access: AccessInfo
    default_version: Optional["ComponentVersionRead"] = None


class ComponentStats(BaseModel):
    component_id: str
    view_count: int
    copy_count: int
    version_count: int
    versions_by_framework: Dict[str, int]
    conversion_rate: Optional[float] = None


class Recommendations(BaseModel):
    similar: List[ComponentRead]
    trending: List[ComponentRead]
    new: List[ComponentRead]
    high_conversion: List[ComponentRead]


class ComponentPreviewFiles(BaseModel):
    preview_image_large: Optional[str] = None
    preview_image_small: Optional[str] = None
    preview_video_url: Optional[str] = None
    files: List[UploadedFile]


class ComponentAssets(BaseModel):
    component_id: str
    version_id: Optional[str] = None
    assets: List[AssetRead]
    total: int
    by_type: Dict[str, int]


class ComponentVersionRead(BaseModel):
    """Schema for reading a component version; sensitive fields may be nulled."""

    id: str
    component_id: str
    version_number: str
    framework: FrameworkType
    css_framework: CssFramework
    code_preview: Optional[str] = None
    code_full: Optional[str] = None
    code_encrypted: Optional[str] = None
    dependencies: Optional[Dict[str, Any]] = None
    config_required: Optional[Dict[str, Any]] = None
    supports_dark_mode: bool
    dark_mode_code: Optional[str] = None
    integrations: Optional[Dict[str, Any]] = None
    integration_code: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None
    is_default: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComponentVersionCreate(BaseModel):
    """Schema for creating a version. ``version_number`` is generated when omitted."""

    version_number: Optional[str] = Field(default=None, pattern=r"^\d+\.\d+\.\d+$", max_length=20)
    framework: FrameworkType
    css_framework: CssFramework
    code_preview: Optional[str] = None
    code_full: Optional[str] = None
    code_encrypted: Optional[str] = None
    dependencies: Optional[Dict[str, Any]] = None
    config_required: Optional[Dict[str, Any]] = None
    supports_dark_mode: bool = False
    dark_mode_code: Optional[str] = None
    integrations: Optional[Dict[str, Any]] = None
    integration_code: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None
    is_default: bool = False


class ComponentVersionUpdate(BaseModel):
    version_number: Optional[str] = Field(default=None, pattern=r"^\d+\.\d+\.\d+$", max_length=20)
    framework: Optional[FrameworkType] = None
    css_framework: Optional[CssFramework] = None
    code_preview: Optional[str] = None
    code_full: Optional[str] = None
    code_encrypted: Optional[str] = None
    dependencies: Optional[Dict[str, Any]] = None
    config_required: Optional[Dict[str, Any]] = None
    supports_dark_mode: Optional[bool] = None
    dark_mode_code: Optional[str] = None
    integrations: Optional[Dict[str, Any]] = None
    integration_code: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None
    is_default: Optional[bool] = None


class VersionDifference(BaseModel):
    field: str
    left: Any = None
    right: Any = None


class VersionComparison(BaseModel):
    left: ComponentVersionRead
    right: ComponentVersionRead
    differences: List[VersionDifference]
    identical: bool


class FrameworkVariant(BaseModel):
    framework: FrameworkType
    css_framework: CssFramework
    available: bool
    version_count: int
    default_version_id: Optional[str] = None
    latest_version: Optional[str] = None


class FrameworkSummary(BaseModel):
    framework: FrameworkType
    css_framework: CssFramework
    count: int


class CompiledPreview(BaseModel):
    component_id: str
    version_id: str
    framework: FrameworkType
    css_framework: CssFramework
    html: str


ComponentDetail.model_rebuild()
