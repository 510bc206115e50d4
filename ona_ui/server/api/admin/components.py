"""
Admin Component Endpoints.

Component management: CRUD in any status, duplication with versions, status
changes, statistics, preview media uploads and batch operations. Requires an
administrator.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from ona_ui.core.database.entities import ComponentStatus
from ona_ui.core.database.repositories import ComponentFilters
from ona_ui.core.models.io import ApiResponse, BatchRequest, BatchResult, Paginated, ok, paginated
from ona_ui.core.models.io.components import (
    ComponentCreate,
    ComponentPreviewFiles,
    ComponentRead,
    ComponentStats,
    ComponentStatusUpdate,
    ComponentUpdate,
)
from ona_ui.core.utils import guess_mime_type
from ona_ui.server.services.components import ComponentService
from ona_ui.server.services.deps import AdminPageDep, AdminUserDep, FileServiceDep, SessionDep, get_admin_user

router = APIRouter(
    tags=["admin-components"],
    dependencies=[Depends(get_admin_user)],
    responses={401: {"description": "Not signed in"}, 403: {"description": "Not an administrator"}},
)


@router.get(
    "",
    response_model=ApiResponse[Paginated[ComponentRead]],
    summary="List Components",
    description="Retrieve components of every status with optional filters.",
    response_description="A page of components.",
)
async def list_components(
    session: SessionDep,
    params: AdminPageDep,
    subcategory_id: Optional[str] = None,
    category_id: Optional[str] = None,
    status_filter: Optional[ComponentStatus] = Query(None, alias="status"),
    is_free: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort: Optional[str] = Query(None, pattern="^(newest|popular|conversion|name)$"),
):
    """
    List components for the dashboard.

    - **status**: ``draft``, ``published``, ``archived`` or ``deprecated``; all when omitted.
    - **subcategory_id** / **category_id**: Restrict to a part of the catalog.
    - **search**: Case-insensitive substring of the component name.
    """
    filters = ComponentFilters(
        subcategory_id=subcategory_id,
        category_id=category_id,
        is_free=is_free,
        status=status_filter,
        is_featured=is_featured,
        search=search,
    )
    page = await ComponentService(session).list_components(filters, params.page, params.limit, sort)
    return ok(paginated(page, ComponentRead.model_validate))


@router.post(
    "",
    response_model=ApiResponse[ComponentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Component",
    description="Create a component in a subcategory; the slug is generated from the name when omitted.",
    response_description="The created component.",
    responses={
        201: {"description": "Component created"},
        404: {"description": "Subcategory not found"},
        409: {"description": "Slug already used in the subcategory"},
    },
)
async def create_component(body: ComponentCreate, session: SessionDep):
    component = await ComponentService(session).create_component(body.model_dump())
    return ok(ComponentRead.model_validate(component), message="Component created")


@router.post(
    "/batch",
    response_model=ApiResponse[BatchResult],
    summary="Batch Operation",
    description="Publish (activate), archive (deactivate) or delete several components.",
    response_description="Per-id outcome and counts.",
)
async def batch_components(body: BatchRequest, session: SessionDep):
    return ok(await ComponentService(session).batch(body.action, body.ids))


@router.get(
    "/{component_id}",
    response_model=ApiResponse[ComponentRead],
    summary="Get Component",
    description="Retrieve a component in any status.",
    response_description="The component.",
    responses={404: {"description": "Component not found"}},
)
async def get_component(component_id: str, session: SessionDep):
    return ok(ComponentRead.model_validate(await ComponentService(session).get_component(component_id)))


@router.put(
    "/{component_id}",
    response_model=ApiResponse[ComponentRead],
    summary="Update Component",
    description="Update the fields present in the body.",
    response_description="The updated component.",
    responses={404: {"description": "Component not found"}, 409: {"description": "Slug already used"}},
)
async def update_component(component_id: str, body: ComponentUpdate, session: SessionDep):
    component = await ComponentService(session).update_component(component_id, body.model_dump(exclude_unset=True))
    return ok(ComponentRead.model_validate(component), message="Component updated")


@router.delete(
    "/{component_id}",
    response_model=ApiResponse[None],
    summary="Delete Component",
    description="Delete a component together with its versions.",
    response_description="Confirmation message.",
    responses={404: {"description": "Component not found"}},
)
async def delete_component(component_id: str, session: SessionDep):
    await ComponentService(session).delete_component(component_id)
    return ok(message="Component deleted")


@router.post(
    "/{component_id}/duplicate",
    response_model=ApiResponse[ComponentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate Component",
    description="Copy a component and all its versions into a new draft.",
    response_description="The new component.",
    responses={404: {"description": "Component not found"}},
)
async def duplicate_component(component_id: str, session: SessionDep):
    copy = await ComponentService(session).duplicate(component_id)
    return ok(ComponentRead.model_validate(copy), message="Component duplicated")


@router.patch(
    "/{component_id}/status",
    response_model=ApiResponse[ComponentRead],
    summary="Change Component Status",
    description="Set the status; publishing and archiving stamp their timestamps.",
    response_description="The updated component.",
    responses={404: {"description": "Component not found"}},
)
async def change_status(component_id: str, body: ComponentStatusUpdate, session: SessionDep):
    component = await ComponentService(session).change_status(component_id, body.status)
    return ok(ComponentRead.model_validate(component), message=f"Component {body.status.value}")


@router.get(
    "/{component_id}/stats",
    response_model=ApiResponse[ComponentStats],
    summary="Component Statistics",
    description="Views, copies and version counts per framework.",
    response_description="The component statistics.",
    responses={404: {"description": "Component not found"}},
)
async def get_component_stats(component_id: str, session: SessionDep):
    return ok(await ComponentService(session).get_stats(component_id))


@router.post(
    "/{component_id}/files",
    response_model=ApiResponse[ComponentPreviewFiles],
    summary="Upload Preview Files",
    description="Upload preview images and videos of a component and link them on the component.",
    response_description="The preview URLs now set on the component and the stored files.",
    responses={
        200: {"description": "Files uploaded"},
        404: {"description": "Component not found"},
        422: {"description": "No files, unsupported type or file too large"},
    },
)
async def upload_preview_files(
    component_id: str,
    session: SessionDep,
    user: AdminUserDep,
    file_service: FileServiceDep,
    files: List[UploadFile] = File(...),
):
    """
    Upload preview media.

    Images larger than 500 KB become **preview_image_large**, smaller ones
    **preview_image_small**; a video becomes **preview_video_url**.

    - **component_id**: The component to attach the media to.
    - **files**: Images and videos (multipart, repeated field).
    """
    contents = [
        (await upload.read(), upload.filename or "file", upload.content_type or guess_mime_type(upload.filename or ""))
        for upload in files
    ]
    result = await ComponentService(session).attach_preview_files(
        component_id, contents, file_service, user_id=user.id
    )
    return ok(result, message="Files uploaded")
