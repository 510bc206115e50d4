"""
Admin Component Version Endpoints.

Versions of one component: CRUD, default selection, comparison, compiled
previews, the framework grid and per-version assets.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from ona_ui.core.database.entities import CssFramework, FrameworkType
from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.components import (
    CompiledPreview,
    ComponentVersionCreate,
    ComponentVersionRead,
    ComponentVersionUpdate,
    FrameworkSummary,
    FrameworkVariant,
    VersionComparison,
    VersionDifference,
)
from ona_ui.core.models.io.files import AssetRead
from ona_ui.core.utils import guess_mime_type
from ona_ui.server.services.component_versions import ComponentVersionService
from ona_ui.server.services.deps import AdminUserDep, FileServiceDep, SessionDep, get_admin_user

router = APIRouter(
    tags=["admin-component-versions"],
    dependencies=[Depends(get_admin_user)],
    responses={
        401: {"description": "Not signed in"},
        403: {"description": "Not an administrator"},
        404: {"description": "Component or version not found"},
    },
)


@router.get(
    "/versions",
    response_model=ApiResponse[List[ComponentVersionRead]],
    summary="List Versions",
    description="All versions of a component, optionally of one framework pair.",
    response_description="A list of versions.",
)
async def list_versions(
    component_id: str,
    session: SessionDep,
    framework: Optional[FrameworkType] = None,
    css_framework: Optional[CssFramework] = None,
):
    versions = await ComponentVersionService(session).list_versions(component_id, framework, css_framework)
    return ok([ComponentVersionRead.model_validate(version) for version in versions])


@router.post(
    "/versions",
    response_model=ApiResponse[ComponentVersionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Version",
    description="Create a version; the number is generated when omitted and the first version becomes default.",
    response_description="The created version.",
    responses={201: {"description": "Version created"}, 409: {"description": "Variant already exists"}},
)
async def create_version(component_id: str, body: ComponentVersionCreate, session: SessionDep):
    """
    Create a version.

    - **version_number**: ``MAJOR.MINOR.PATCH``; defaults to ``1.0.0`` or the next patch.
    - **framework** / **css_framework**: The variant this code targets.
    - **is_default**: Make this the only default version of the component.
    """
    version = await ComponentVersionService(session).create_version(component_id, body.model_dump())
    return ok(ComponentVersionRead.model_validate(version), message="Version created")


@router.get(
    "/frameworks",
    response_model=ApiResponse[List[FrameworkSummary]],
    summary="List Frameworks",
    description="Framework pairs that have versions, with their counts.",
    response_description="Framework pairs and counts.",
)
async def list_frameworks(component_id: str, session: SessionDep):
    return ok(await ComponentVersionService(session).get_frameworks(component_id))


@router.get(
    "/variants",
    response_model=ApiResponse[List[FrameworkVariant]],
    summary="List Variants",
    description="The complete framework by CSS framework grid with availability flags.",
    response_description="One entry per framework pair.",
)
async def list_variants(component_id: str, session: SessionDep):
    return ok(await ComponentVersionService(session).get_variants(component_id))


@router.get(
    "/versions/{version_id}",
    response_model=ApiResponse[ComponentVersionRead],
    summary="Get Version",
    description="Retrieve one version of the component.",
    response_description="The version.",
)
async def get_version(component_id: str, version_id: str, session: SessionDep):
    version = await ComponentVersionService(session).get_version(component_id, version_id)
    return ok(ComponentVersionRead.model_validate(version))


@router.put(
    "/versions/{version_id}",
    response_model=ApiResponse[ComponentVersionRead],
    summary="Update Version",
    description="Update the fields present in the body; setting is_default moves the default here.",
    response_description="The updated version.",
    responses={409: {"description": "Variant already exists"}, 422: {"description": "Cannot unset the default"}},
)
async def update_version(component_id: str, version_id: str, body: ComponentVersionUpdate, session: SessionDep):
    version = await ComponentVersionService(session).update_version(
        component_id, version_id, body.model_dump(exclude_unset=True)
    )
    return ok(ComponentVersionRead.model_validate(version), message="Version updated")


@router.delete(
    "/versions/{version_id}",
    response_model=ApiResponse[Optional[ComponentVersionRead]],
    summary="Delete Version",
    description="Delete a version. Deleting the default promotes the most recent remaining version.",
    response_description="The version promoted to default, if any.",
    responses={422: {"description": "Last remaining version"}},
)
async def delete_version(component_id: str, version_id: str, session: SessionDep):
    promoted = await ComponentVersionService(session).delete_version(component_id, version_id)
    return ok(ComponentVersionRead.model_validate(promoted) if promoted else None, message="Version deleted")


@router.post(
    "/versions/{version_id}/set-default",
    response_model=ApiResponse[ComponentVersionRead],
    summary="Set Default Version",
    description="Make this version the only default of the component.",
    response_description="The new default version.",
)
async def set_default_version(component_id: str, version_id: str, session: SessionDep):
    version = await ComponentVersionService(session).set_default(component_id, version_id)
    return ok(ComponentVersionRead.model_validate(version), message="Default version updated")


@router.get(
    "/versions/{version_id}/compare/{other_id}",
    response_model=ApiResponse[VersionComparison],
    summary="Compare Versions",
    description="Field-by-field difference of two versions of the component.",
    response_description="Both versions and the differing fields.",
)
async def compare_versions(component_id: str, version_id: str, other_id: str, session: SessionDep):
    result = await ComponentVersionService(session).compare(component_id, version_id, other_id)
    return ok(
        VersionComparison(
            left=ComponentVersionRead.model_validate(result["left"]),
            right=ComponentVersionRead.model_validate(result["right"]),
            differences=[VersionDifference(**difference) for difference in result["differences"]],
            identical=result["identical"],
        )
    )


@router.get(
    "/versions/{version_id}/compile",
    response_model=ApiResponse[CompiledPreview],
    summary="Compile Version",
    description="Compile the version into a standalone HTML preview document.",
    response_description="The compiled HTML.",
)
async def compile_version(component_id: str, version_id: str, session: SessionDep):
    return ok(await ComponentVersionService(session).compile_preview(component_id, version_id))


@router.get(
    "/versions/{version_id}/assets",
    response_model=ApiResponse[List[AssetRead]],
    summary="List Version Assets",
    description="Files uploaded for this version.",
    response_description="A list of assets.",
)
async def list_version_assets(component_id: str, version_id: str, files: FileServiceDep):
    assets = await files.list_version_assets(component_id, version_id)
    return ok([AssetRead.model_validate(asset) for asset in assets])


@router.post(
    "/versions/{version_id}/assets",
    response_model=ApiResponse[AssetRead],
    status_code=status.HTTP_201_CREATED,
    summary="Upload Version Asset",
    description="Upload a file (multipart) and attach it to this version.",
    response_description="The stored asset.",
    responses={201: {"description": "Asset uploaded"}, 422: {"description": "File too large"}},
)
async def upload_version_asset(
    component_id: str,
    version_id: str,
    user: AdminUserDep,
    files: FileServiceDep,
    file: UploadFile = File(...),
):
    data = await file.read()
    name = file.filename or "asset"
    asset = await files.upload_version_asset(
        component_id, version_id, data, name, file.content_type or guess_mime_type(name), user_id=user.id
    )
    return ok(AssetRead.model_validate(asset), message="Asset uploaded")


@router.delete(
    "/versions/{version_id}/assets/{asset_id}",
    response_model=ApiResponse[None],
    summary="Delete Version Asset",
    description="Remove an asset from storage and from this version.",
    response_description="Confirmation message.",
)
async def delete_version_asset(component_id: str, version_id: str, asset_id: str, files: FileServiceDep):
    await files.delete_version_asset(component_id, version_id, asset_id)
    return ok(message="Asset deleted")
