"""
Repositories organized by table.

Each repository wraps an ``AsyncSession`` and exposes the queries its
services need; generic CRUD comes from ``AsyncCrudRepository``.
"""

from .assets import AssetRepository
from .base import AsyncBaseRepository, AsyncCrudRepository, Page, QueryBuilder
from .catalog import CategoryRepository, ProductRepository, SubcategoryRepository
from .components import ComponentFilters, ComponentRepository, ComponentVersionRepository
from .licenses import LicenseRepository
from .sessions import UserSessionRepository, VerificationRepository
from .users import AccountRepository, UserRepository

__all__ = [
    "AccountRepository",
    "AssetRepository",
    "AsyncBaseRepository",
    "AsyncCrudRepository",
    "CategoryRepository",
    "ComponentFilters",
    "ComponentRepository",
    "ComponentVersionRepository",
    "LicenseRepository",
    "Page",
    "ProductRepository",
    "QueryBuilder",
    "SubcategoryRepository",
    "UserRepository",
    "UserSessionRepository",
    "VerificationRepository",
]
