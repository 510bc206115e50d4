"""
Response envelope and pagination I/O models.

Every endpoint answers ``{success, data, message, timestamp}`` on success and
``{success: false, error: {code, message, details}, timestamp}`` on failure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.repositories.base import Page

DataT = TypeVar("DataT")
ItemT = TypeVar("ItemT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope."""

    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error envelope."""

    success: bool = False
    error: ErrorBody
    timestamp: datetime = Field(default_factory=utc_now)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = (total + limit - 1) // limit if limit else 0
        has_next = page < total_pages
        has_prev = page > 1
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=has_next,
            has_prev_page=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None,
        )


class Paginated(BaseModel, Generic[ItemT]):
    items: List[ItemT]
    pagination: PaginationMeta


class BatchRequest(BaseModel):
    """Batch operation over a list of ids."""

    action: str = Field(description="Operation to apply: activate, deactivate or delete")
    ids: List[str] = Field(min_length=1, max_length=100)


class BatchResult(BaseModel):
    action: str
    succeeded: List[str] = Field(default_factory=list)
    failed: List[Dict[str, str]] = Field(default_factory=list)
    success_count: int = 0
    error_count: int = 0


class ReorderRequest(BaseModel):
    ids: List[str] = Field(min_length=1, description="Ids in their new display order")


class SlugAvailability(BaseModel):
    slug: str
    available: bool


def ok(data: Any = None, message: Optional[str] = None) -> ApiResponse:
    """Wrap ``data`` in the success envelope."""
    return ApiResponse(data=data, message=message)


def paginated(page: Page, serialize: Callable[[Any], Any]) -> Paginated:
    """Build the paginated payload of a repository ``Page``."""
    return Paginated(
        items=[serialize(item) for item in page.items],
        pagination=PaginationMeta.build(page.page, page.limit, page.total),
    )
