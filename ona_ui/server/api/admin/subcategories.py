"""
Admin Subcategory Endpoints.

Subcategory management: CRUD, moving between categories, ordering, slug
checks and batch operations. Requires an administrator.
"""

from typing import Optional

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
from ona_ui.core.models.io.catalog import SubcategoryCreate, SubcategoryMove, SubcategoryRead, SubcategoryUpdate
from ona_ui.server.services.catalog import SubcategoryService
from ona_ui.server.services.deps import AdminPageDep, SessionDep, get_admin_user

router = APIRouter(
    tags=["admin-subcategories"],
    dependencies=[Depends(get_admin_user)],
    responses={401: {"description": "Not signed in"}, 403: {"description": "Not an administrator"}},
)


@router.get(
    "",
    response_model=ApiResponse[Paginated[SubcategoryRead]],
    summary="List Subcategories",
    description="Retrieve subcategories, optionally of one category.",
    response_description="A page of subcategories.",
)
async def list_subcategories(
    session: SessionDep,
    params: AdminPageDep,
    category_id: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    is_active: Optional[bool] = None,
):
    page = await SubcategoryService(session).list_subcategories(
        params.page, params.limit, category_id, search, is_active, params.sort_by, params.sort_order
    )
    return ok(paginated(page, SubcategoryRead.model_validate))


@router.post(
    "",
    response_model=ApiResponse[SubcategoryRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Subcategory",
    description="Create a subcategory in a category; the slug is generated from the name when omitted.",
    response_description="The created subcategory.",
    responses={
        201: {"description": "Subcategory created"},
        404: {"description": "Category not found"},
        409: {"description": "Slug already used in the category"},
    },
)
async def create_subcategory(body: SubcategoryCreate, session: SessionDep):
    """
    Create a new subcategory.

    - **category_id**: Parent category.
    - **name**: Display name.
    - **slug**: Optional; unique within the category.
    """
    subcategory = await SubcategoryService(session).create_subcategory(body.model_dump())
    return ok(SubcategoryRead.model_validate(subcategory), message="Subcategory created")


@router.get(
    "/check-slug",
    response_model=ApiResponse[SlugAvailability],
    summary="Check Slug Availability",
    description="Whether a slug is well formed and unused in the category.",
    response_description="The availability of the slug.",
)
async def check_slug(
    session: SessionDep,
    slug: str = Query(..., min_length=1, max_length=255),
    category_id: str = Query(..., min_length=1),
    exclude_id: Optional[str] = Query(None, description="Subcategory being edited"),
):
    available = await SubcategoryService(session).check_slug(slug, category_id, exclude_id)
    return ok(SlugAvailability(slug=slug, available=available))


@router.post(
    "/reorder",
    response_model=ApiResponse[None],
    summary="Reorder Subcategories",
    description="Set the display order from a list of ids.",
    response_description="Confirmation message.",
)
async def reorder_subcategories(body: ReorderRequest, session: SessionDep):
    await SubcategoryService(session).reorder(body.ids)
    return ok(message="Subcategories reordered")


@router.post(
    "/batch",
    response_model=ApiResponse[BatchResult],
    summary="Batch Operation",
    description="Activate, deactivate or delete several subcategories; failures are reported per id.",
    response_description="Per-id outcome and counts.",
)
async def batch_subcategories(body: BatchRequest, session: SessionDep):
    return ok(await SubcategoryService(session).batch(body.action, body.ids))


@router.get(
    "/{subcategory_id}",
    response_model=ApiResponse[SubcategoryRead],
    summary="Get Subcategory",
    description="Retrieve a subcategory by id.",
    response_description="The subcategory.",
    responses={404: {"description": "Subcategory not found"}},
)
async def get_subcategory(subcategory_id: str, session: SessionDep):
    return ok(SubcategoryRead.model_validate(await SubcategoryService(session).get_subcategory(subcategory_id)))


@router.put(
    "/{subcategory_id}",
    response_model=ApiResponse[SubcategoryRead],
    summary="Update Subcategory",
    description="Update the fields present in the body.",
    response_description="The updated subcategory.",
    responses={404: {"description": "Subcategory not found"}, 409: {"description": "Slug already used"}},
)
async def update_subcategory(subcategory_id: str, body: SubcategoryUpdate, session: SessionDep):
    subcategory = await SubcategoryService(session).update_subcategory(
        subcategory_id, body.model_dump(exclude_unset=True)
    )
    return ok(SubcategoryRead.model_validate(subcategory), message="Subcategory updated")


@router.delete(
    "/{subcategory_id}",
    response_model=ApiResponse[None],
    summary="Delete Subcategory",
    description="Delete a subcategory without components.",
    response_description="Confirmation message.",
    responses={404: {"description": "Subcategory not found"}, 409: {"description": "Subcategory has components"}},
)
async def delete_subcategory(subcategory_id: str, session: SessionDep):
    await SubcategoryService(session).delete_subcategory(subcategory_id)
    return ok(message="Subcategory deleted")


@router.post(
    "/{subcategory_id}/move",
    response_model=ApiResponse[SubcategoryRead],
    summary="Move Subcategory",
    description="Move a subcategory to another category; its slug must be free there.",
    response_description="The moved subcategory.",
    responses={404: {"description": "Subcategory or category not found"}, 409: {"description": "Slug clash"}},
)
async def move_subcategory(subcategory_id: str, body: SubcategoryMove, session: SessionDep):
    subcategory = await SubcategoryService(session).move(subcategory_id, body.category_id)
    return ok(SubcategoryRead.model_validate(subcategory), message="Subcategory moved")
