"""
Request and response models of the REST API.

These are plain Pydantic models; the database entities live in
``ona_ui.core.database.entities`` and are converted with ``model_validate``.
"""

from .common import (
    ApiResponse,
    BatchRequest,
    BatchResult,
    ErrorBody,
    ErrorResponse,
    Paginated,
    PaginationMeta,
    ReorderRequest,
    SlugAvailability,
    ok,
    paginated,
)

__all__ = [
    "ApiResponse",
    "BatchRequest",
    "BatchResult",
    "ErrorBody",
    "ErrorResponse",
    "Paginated",
    "PaginationMeta",
    "ReorderRequest",
    "SlugAvailability",
    "ok",
    "paginated",
]
