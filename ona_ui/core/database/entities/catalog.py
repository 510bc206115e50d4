"""
Catalog hierarchy entity models.

The catalog is organised as Product -> Category -> Subcategory -> Component.
Slugs are unique among siblings only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ProductBase(Base):
    """Base fields for a product line (e.g. ``ui``)."""

    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    description: Optional[str] = Field(default=None)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class Product(ProductBase, table=True):
    """Table: products"""

    __tablename__ = "products"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class CategoryBase(Base):
    """Base fields for a category."""

    product_id: str = Field(foreign_key="products.id", index=True, max_length=36)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None)
    icon_name: Optional[str] = Field(default=None, max_length=100)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class Category(CategoryBase, table=True):
    """Table: categories"""

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("product_id", "slug", name="uq_categories_product_slug"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class SubcategoryBase(Base):
    """Base fields for a subcategory."""

    category_id: str = Field(foreign_key="categories.id", index=True, max_length=36)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class Subcategory(SubcategoryBase, table=True):
    """Table: subcategories"""

    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("category_id", "slug", name="uq_subcategories_category_slug"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
