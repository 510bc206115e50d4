"""
Admin Category Endpoints.

Category management for the admin dashboard: CRUD, ordering, slug checks,
statistics, export and batch operations. Requires an administrator.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ona_ui.core.models.io import (
    ApiResponse,
    BatchRequest,
    BatchResult,
    Paginated,
    ReorderRequest,
    SlugAvailability,
    ok,
    paginated,
)
from ona_ui.core.models.io.catalog import (
    CategoryCreate,
    CategoryRead,
    CategoryStats,
    CategoryUpdate,
    CategoryWithSubcategories,
    GlobalStats,
)
from ona_ui.server.services.catalog import CategoryService
from ona_ui.server.services.deps import AdminPageDep, SessionDep, get_admin_user

router = APIRouter(
    tags=["admin-categories"],
    dependencies=[Depends(get_admin_user)],
    responses={401: {"description": "Not signed in"}, 403: {"description": "Not an administrator"}},
)


@router.get(
    "",
    response_model=ApiResponse[Paginated[CategoryRead]],
    summary="List Categories",
    description="Retrieve categories with optional product, name and activity filters.",
    response_description="A page of categories.",
)
async def list_categories(
    session: SessionDep,
    params: AdminPageDep,
    product_id: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    is_active: Optional[bool] = None,
):
    """
    List categories.

    - **product_id**: Optional product filter.
    - **search**: Optional substring of the category name.
    - **is_active**: Optional activity filter.
    """
    page = await CategoryService(session).list_categories(
        params.page, params.limit, product_id, search, is_active, params.sort_by, params.sort_order
    )
    return ok(paginated(page, CategoryRead.model_validate))


@router.post(
    "",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    description="Create a category; the slug is generated from the name when omitted.",
    response_description="The created category.",
    responses={
        201: {"description": "Category created"},
        409: {"description": "Slug already used in the product"},
        422: {"description": "Invalid slug or payload"},
    },
)
async def create_category(body: CategoryCreate, session: SessionDep):
    """
    Create a new category.

    - **name**: Display name.
    - **slug**: Optional; lowercase letters, digits and single dashes.
    - **sort_order**: Optional; defaults to the end of the list.
    """
    category = await CategoryService(session).create_category(body.model_dump())
    return ok(CategoryRead.model_validate(category), message="Category created")


@router.get(
    "/stats/detailed",
    response_model=ApiResponse[List[CategoryStats]],
    summary="Detailed Category Statistics",
    description="Subcategory and component counts of every category.",
    response_description="Per-category statistics.",
)
async def get_detailed_stats(session: SessionDep):
    return ok(await CategoryService(session).get_detailed_stats())


@router.get(
    "/global-stats",
    response_model=ApiResponse[GlobalStats],
    summary="Global Statistics",
    description="Catalog, user, license and revenue totals.",
    response_description="Global statistics.",
)
async def get_global_stats(session: SessionDep):
    return ok(await CategoryService(session).get_global_stats())


@router.get(
    "/check-slug",
    response_model=ApiResponse[SlugAvailability],
    summary="Check Slug Availability",
    description="Whether a slug is well formed and unused in the product.",
    response_description="The availability of the slug.",
)
async def check_slug(
    session: SessionDep,
    slug: str = Query(..., min_length=1, max_length=255),
    product_id: Optional[str] = None,
    exclude_id: Optional[str] = Query(None, description="Category being edited"),
):
    available = await CategoryService(session).check_slug(slug, product_id, exclude_id)
    return ok(SlugAvailability(slug=slug, available=available))


@router.get(
    "/export",
    response_model=ApiResponse[List[dict]],
    summary="Export Categories",
    description="All categories with their subcategories as JSON.",
    response_description="The exported catalog tree.",
)
async def export_categories(session: SessionDep):
    return ok(await CategoryService(session).export())


@router.post(
    "/reorder",
    response_model=ApiResponse[None],
    summary="Reorder Categories",
    description="Set the display order from a list of ids (first id gets sort order 1).",
    response_description="Confirmation message.",
    responses={404: {"description": "Unknown category id"}},
)
async def reorder_categories(body: ReorderRequest, session: SessionDep):
    await CategoryService(session).reorder(body.ids)
    return ok(message="Categories reordered")


@router.post(
    "/batch",
    response_model=ApiResponse[BatchResult],
    summary="Batch Operation",
    description="Activate, deactivate or delete several categories; failures are reported per id.",
    response_description="Per-id outcome and counts.",
)
async def batch_categories(body: BatchRequest, session: SessionDep):
    """
    Apply one action to many categories.

    - **action**: ``activate``, ``deactivate`` or ``delete``.
    - **ids**: Up to 100 category ids.
    """
    return ok(await CategoryService(session).batch(body.action, body.ids))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryWithSubcategories],
    summary="Get Category",
    description="Retrieve a category with all its subcategories and their component counts.",
    response_description="The category.",
    responses={404: {"description": "Category not found"}},
)
async def get_category(category_id: str, session: SessionDep):
    service = CategoryService(session)
    category = await service.get_category(category_id)
    return ok(await service.get_with_subcategories(category))


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryRead],
    summary="Update Category",
    description="Update the fields present in the body.",
    response_description="The updated category.",
    responses={404: {"description": "Category not found"}, 409: {"description": "Slug already used"}},
)
async def update_category(category_id: str, body: CategoryUpdate, session: SessionDep):
    category = await CategoryService(session).update_category(category_id, body.model_dump(exclude_unset=True))
    return ok(CategoryRead.model_validate(category), message="Category updated")


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    summary="Delete Category",
    description="Delete a category without subcategories.",
    response_description="Confirmation message.",
    responses={404: {"description": "Category not found"}, 409: {"description": "Category has subcategories"}},
)
async def delete_category(category_id: str, session: SessionDep):
    await CategoryService(session).delete_category(category_id)
    return ok(message="Category deleted")
