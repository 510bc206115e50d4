"""
Admin File Endpoints.

Image and video uploads for component previews, batch asset uploads from the
build pipeline, and file inspection or deletion by storage path.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ona_ui.core.logging_config import get_logger
from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.files import BatchUploadRequest, BatchUploadResult, FileInfo, UploadedFile
from ona_ui.core.utils import guess_mime_type
from ona_ui.server.services.batch_upload import BatchUploadService
from ona_ui.server.services.deps import AdminUserDep, FileServiceDep, get_admin_user

logger = get_logger(__name__)

router = APIRouter(
    tags=["admin-files"],
    dependencies=[Depends(get_admin_user)],
    responses={401: {"description": "Not signed in"}, 403: {"description": "Not an administrator"}},
)


def _content_type(file: UploadFile) -> str:
    return file.content_type or guess_mime_type(file.filename or "")


@router.post(
    "/images",
    response_model=ApiResponse[UploadedFile],
    status_code=status.HTTP_201_CREATED,
    summary="Upload Image",
    description="Upload a JPEG, PNG, WebP, GIF or SVG image to public storage.",
    response_description="The stored file with its public URL.",
    responses={
        201: {"description": "Image uploaded"},
        422: {"description": "Unsupported type or file too large"},
    },
)
async def upload_image(
    user: AdminUserDep,
    files: FileServiceDep,
    file: UploadFile = File(...),
    folder: str = Form("images"),
):
    """
    Upload an image.

    Identical content uploaded before is not stored twice; the existing file
    is returned with **deduplicated** set.

    - **file**: The image (multipart).
    - **folder**: Target folder, ``images`` by default.
    """
    uploaded = await files.upload_image(
        await file.read(), file.filename or "image", _content_type(file), user_id=user.id, folder=folder
    )
    return ok(uploaded, message="Image uploaded")


@router.post(
    "/videos",
    response_model=ApiResponse[UploadedFile],
    status_code=status.HTTP_201_CREATED,
    summary="Upload Video",
    description="Upload an MP4, WebM, QuickTime or AVI video (50 MB max) to public storage.",
    response_description="The stored file with its public URL.",
    responses={
        201: {"description": "Video uploaded"},
        422: {"description": "Unsupported type or file too large"},
    },
)
async def upload_video(
    user: AdminUserDep,
    files: FileServiceDep,
    file: UploadFile = File(...),
    folder: str = Form("videos"),
):
    uploaded = await files.upload_video(
        await file.read(), file.filename or "video", _content_type(file), user_id=user.id, folder=folder
    )
    return ok(uploaded, message="Video uploaded")


@router.post(
    "/batch-upload",
    response_model=ApiResponse[BatchUploadResult],
    summary="Batch Upload Assets",
    description="Upload base64-encoded build assets with bounded concurrency, retries and hash checks.",
    response_description="Uploaded and skipped assets with per-file errors.",
)
async def batch_upload(body: BatchUploadRequest, user: AdminUserDep, files: FileServiceDep):
    """
    Upload a manifest of assets.

    Shared assets are uploaded before component assets. Failures of single
    files are collected in **errors** and do not abort the batch.

    - **files**: Assets with ``content`` (base64) and an optional sha256 ``hash``.
    - **skip_existing**: Skip assets whose hash is already stored.
    - **max_concurrency**: Parallel uploads, at most 10.
    - **retry_attempts**: Attempts per asset, with exponential backoff.
    """
    result = await BatchUploadService(files).upload(body, user_id=user.id)
    message = f"Uploaded {result.total_uploaded} assets, skipped {result.total_skipped}"
    if result.errors:
        logger.warning(f"Batch upload finished with {len(result.errors)} errors")
        message += f", {len(result.errors)} failed"
    return ok(result, message=message)


@router.get(
    "/info",
    response_model=ApiResponse[FileInfo],
    summary="File Information",
    description="Existence, size and URL of a stored file.",
    response_description="The file information.",
)
async def get_file_info(
    files: FileServiceDep,
    path: str = Query(..., min_length=1),
    disk: Optional[str] = Query(None, description="Disk name; looked up from the asset record when omitted"),
):
    return ok(await files.get_file_info(path, disk))


@router.delete(
    "",
    response_model=ApiResponse[None],
    summary="Delete File",
    description="Delete a stored file and its asset records.",
    response_description="Confirmation message.",
    responses={404: {"description": "File not found"}},
)
async def delete_file(
    files: FileServiceDep,
    path: str = Query(..., min_length=1),
    disk: Optional[str] = None,
):
    await files.delete_file(path, disk)
    return ok(message="File deleted")
