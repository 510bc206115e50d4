"""
Catalog I/O models for categories, subcategories and navigation.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

SLUG_REGEX = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryRead(BaseModel):
    """Schema for reading a category."""

    id: str
    product_id: str
    name: str
    slug: str
    description: Optional[str] = None
    icon_name: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Schema for creating a category. ``slug`` is derived from ``name`` when omitted."""

    product_id: Optional[str] = Field(default=None, description="Owning product, defaults to the first active product")
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=100)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=100)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class SubcategoryRead(BaseModel):
    """Schema for reading a subcategory."""

    id: str
    category_id: str
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SubcategoryCreate(BaseModel):
    category_id: str
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True


class SubcategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class SubcategoryMove(BaseModel):
    category_id: str = Field(description="Target category")


class SubcategoryWithCount(SubcategoryRead):
    component_count: int = 0


class CategoryWithSubcategories(CategoryRead):
    subcategories: List[SubcategoryWithCount] = Field(default_factory=list)


class NavigationSubcategory(BaseModel):
    id: str
    name: str
    slug: str
    component_count: int


class NavigationCategory(BaseModel):
    id: str
    name: str
    slug: str
    icon_name: Optional[str] = None
    subcategories: List[NavigationSubcategory]


class NavigationStructure(BaseModel):
    categories: List[NavigationCategory]
    total_components: int


class CategoryStats(BaseModel):
    id: str
    name: str
    slug: str
    subcategory_count: int
    component_count: int
    published_component_count: int


class GlobalStats(BaseModel):
    total_categories: int
    total_subcategories: int
    total_components: int
    components_by_status: dict
    total_versions: int
    total_views: int
    total_copies: int
    total_users: int
    active_licenses: int
    total_revenue: int
