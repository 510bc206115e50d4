"""
Public Category Endpoints.

Read-only catalog browsing for the documentation site: active categories,
the navigation tree and catalog statistics. Responses are cacheable.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ona_ui.core.errors import NotFoundError
from ona_ui.core.models.io import ApiResponse, Paginated, ok, paginated
from ona_ui.core.models.io.catalog import (
    CategoryRead,
    CategoryWithSubcategories,
    GlobalStats,
    NavigationStructure,
)
from ona_ui.server.services.catalog import CategoryService
from ona_ui.server.services.deps import PublicPageDep, SessionDep, public_cache

router = APIRouter(tags=["public-categories"], dependencies=[Depends(public_cache)])


@router.get(
    "",
    response_model=ApiResponse[Paginated[CategoryRead]],
    summary="List Categories",
    description="Retrieve the active categories, paginated and optionally filtered by product or name.",
    response_description="A page of categories.",
)
async def list_categories(
    session: SessionDep,
    params: PublicPageDep,
    product_id: Optional[str] = Query(None, description="Restrict to one product"),
    search: Optional[str] = Query(None, max_length=100, description="Case-insensitive name filter"),
):
    """
    List categories.

    - **product_id**: Optional product filter.
    - **search**: Optional substring of the category name.
    """
    page = await CategoryService(session).list_categories(
        params.page, params.limit, product_id, search, True, params.sort_by or "sort_order", params.sort_order
    )
    return ok(paginated(page, CategoryRead.model_validate))


@router.get(
    "/navigation",
    response_model=ApiResponse[NavigationStructure],
    summary="Navigation Tree",
    description="Active categories with their active subcategories and published component counts.",
    response_description="The navigation structure.",
)
async def get_navigation(session: SessionDep):
    """
    Get the navigation tree used by the documentation sidebar.
    """
    return ok(await CategoryService(session).get_navigation())


@router.get(
    "/stats",
    response_model=ApiResponse[GlobalStats],
    summary="Catalog Statistics",
    description="Totals of categories, subcategories, components, versions, users and licenses.",
    response_description="Global statistics.",
)
async def get_stats(session: SessionDep):
    return ok(await CategoryService(session).get_global_stats())


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryWithSubcategories],
    summary="Get Category",
    description="Retrieve an active category with its active subcategories and published component counts.",
    response_description="The category with its subcategories.",
    responses={
        200: {"description": "Category found"},
        404: {"description": "Category not found or inactive"},
    },
)
async def get_category(category_id: str, session: SessionDep):
    """
    Get category by ID.

    - **category_id**: The unique identifier of the category.
    """
    service = CategoryService(session)
    category = await service.get_category(category_id)
    if not category.is_active:
        raise NotFoundError("Category", category_id)
    return ok(await service.get_with_subcategories(category, active_only=True))
