"""
File Service.

Validated uploads of images, videos and generic files to the storage disks.
Uploads are deduplicated by sha256 digest through the ``assets`` table: the
same content uploaded twice returns the first stored file.
"""

from __future__ import annotations

import asyncio
import hashlib
import secrets
import string
import time
from pathlib import PurePosixPath
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.entities import Asset
from ona_ui.core.database.repositories import AssetRepository, ComponentVersionRepository
from ona_ui.core.errors import NotFoundError, ValidationError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.models.io.files import FileInfo, UploadedFile
from ona_ui.core.utils import generate_slug
from ona_ui.server.core.config import StorageConfig, settings

from .storage import Disk, StorageManager, get_storage

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/webp": (".webp",),
    "image/gif": (".gif",),
    "image/svg+xml": (".svg",),
}
ALLOWED_VIDEO_TYPES = {
    "video/mp4": (".mp4",),
    "video/webm": (".webm",),
    "video/quicktime": (".mov",),
    "video/x-msvideo": (".avi",),
}
MAX_VIDEO_SIZE = 50 * 1024 * 1024
FILENAME_BASE_LENGTH = 20
RANDOM_ALPHABET = string.ascii_lowercase + string.digits


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def unique_filename(original_name: str, content_hash: Optional[str] = None) -> str:
    """
    Storage name for an upload.

    ``slug-hash16.ext`` when the content hash is known (stable across
    uploads of the same content), otherwise ``slug-timestamp-random.ext``.
    """
    path = PurePosixPath(original_name)
    ext = path.suffix.lower()
    base = generate_slug(path.stem[:FILENAME_BASE_LENGTH]) or "file"
    if content_hash:
        return f"{base}-{content_hash[:16]}{ext}"
    random_part = "".join(secrets.choice(RANDOM_ALPHABET) for _ in range(6))
    return f"{base}-{int(time.time() * 1000)}-{random_part}{ext}"


def _check_type(original_name: str, mime_type: str, allowed: dict, kind: str) -> None:
    if mime_type not in allowed:
        raise ValidationError(
            f"File type not allowed. Accepted {kind} types: {', '.join(allowed)}",
            details={"mime_type": mime_type},
        )
    ext = PurePosixPath(original_name).suffix.lower()
    if ext not in allowed[mime_type]:
        raise ValidationError(
            f"Extension not allowed for {mime_type}. Accepted: {', '.join(allowed[mime_type])}",
            details={"extension": ext},
        )


def _check_size(data: bytes, max_size: int, kind: str) -> None:
    if not data:
        raise ValidationError("File is empty")
    if len(data) > max_size:
        raise ValidationError(
            f"{kind} too large. Maximum size: {max_size // (1024 * 1024)}MB",
            details={"size": len(data), "max_size": max_size},
        )


class FileService:
    """Service for uploads, file metadata and version assets."""

    def __init__(
        self,
        session: AsyncSession,
        storage: Optional[StorageManager] = None,
        config: Optional[StorageConfig] = None,
    ):
        self.session = session
        self.storage = storage or get_storage()
        self.config = config or settings.storage
        self.assets = AssetRepository(session)
        self.versions = ComponentVersionRepository(session)
        # AsyncSession does not allow concurrent operations; storage writes can overlap
        self._session_lock = asyncio.Lock()

    async def find_by_hash(self, digest: str) -> Optional[Asset]:
        async with self._session_lock:
            return await self.assets.get_by_hash(digest)

    @staticmethod
    def _from_asset(asset: Asset, deduplicated: bool = False) -> UploadedFile:
        return UploadedFile(
            path=asset.path,
            url=asset.url,
            disk=asset.disk,
            size=asset.size,
            mime_type=asset.mime_type,
            hash=asset.hash,
            original_name=asset.original_name,
            deduplicated=deduplicated,
        )

    async def _store(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        folder: str,
        filename: str,
        *,
        public: bool = True,
        user_id: Optional[str] = None,
        content_hash: Optional[str] = None,
        cache_control: Optional[str] = None,
        version_id: Optional[str] = None,
        deduplicate: bool = True,
    ) -> UploadedFile:
        digest = content_hash or sha256_hex(data)
        if deduplicate:
            existing = await self.find_by_hash(digest)
            if existing is not None:
                logger.info(f"Upload of {original_name} deduplicated to {existing.path}")
                return self._from_asset(existing, deduplicated=True)

        path = f"{folder.strip('/')}/{filename}" if folder else filename
        disk = await self.storage.put(path, data, public=public, content_type=mime_type, cache_control=cache_control)
        url = await disk.get_url(path)
        async with self._session_lock:
            asset = await self.assets.create(
                Asset(
                    path=path,
                    disk=disk.name,
                    url=url,
                    hash=digest,
                    size=len(data),
                    mime_type=mime_type,
                    original_name=original_name,
                    is_public=public,
                    component_version_id=version_id,
                    uploaded_by=user_id,
                )
            )
        logger.info(f"Stored {original_name} as {path} on {disk.name} ({len(data)} bytes)")
        return self._from_asset(asset)

    async def upload_image(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        user_id: Optional[str] = None,
        folder: str = "images",
        public: bool = True,
    ) -> UploadedFile:
        _check_size(data, self.config.max_image_size, "Image")
        _check_type(original_name, mime_type, ALLOWED_IMAGE_TYPES, "image")
        return await self._store(
            data, original_name, mime_type, folder, unique_filename(original_name), public=public, user_id=user_id
        )

    async def upload_video(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        user_id: Optional[str] = None,
        folder: str = "videos",
        public: bool = True,
    ) -> UploadedFile:
        _check_size(data, MAX_VIDEO_SIZE, "Video")
        _check_type(original_name, mime_type, ALLOWED_VIDEO_TYPES, "video")
        return await self._store(
            data, original_name, mime_type, folder, unique_filename(original_name), public=public, user_id=user_id
        )

    async def upload_file(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        user_id: Optional[str] = None,
        folder: str = "files",
        public: bool = False,
    ) -> UploadedFile:
        _check_size(data, self.config.max_file_size, "File")
        return await self._store(
            data, original_name, mime_type, folder, unique_filename(original_name), public=public, user_id=user_id
        )

    async def upload_file_with_hash(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        content_hash: str,
        user_id: Optional[str] = None,
        folder: str = "files",
        public: bool = True,
    ) -> UploadedFile:
        """Upload content whose sha256 digest the caller already knows.

        Raises:
            ValidationError: The digest does not match the content.
        """
        _check_size(data, self.config.max_file_size, "File")
        if sha256_hex(data) != content_hash.lower():
            raise ValidationError("Provided hash does not match the file content")
        return await self._store(
            data,
            original_name,
            mime_type,
            folder,
            unique_filename(original_name, content_hash.lower()),
            public=public,
            user_id=user_id,
            content_hash=content_hash.lower(),
        )

    async def upload_file_with_preserved_name(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        user_id: Optional[str] = None,
        folder: str = "files",
        public: bool = True,
        cache_control: Optional[str] = None,
    ) -> UploadedFile:
        """Upload under the given file name; used for bundles referenced by name."""
        _check_size(data, self.config.max_file_size, "File")
        return await self._store(
            data,
            original_name,
            mime_type,
            folder,
            PurePosixPath(original_name).name,
            public=public,
            user_id=user_id,
            cache_control=cache_control,
            deduplicate=False,
        )

    async def _disk_for(self, path: str, disk: Optional[str]) -> Disk:
        if disk:
            return self.storage.use(disk)
        asset = await self.assets.get_by_path(path)
        if asset is not None:
            return self.storage.use(asset.disk)
        return self.storage.upload_disk(public=True)

    async def delete_file(self, path: str, disk: Optional[str] = None) -> None:
        target = await self.storage.locate(path, await self._disk_for(path, disk))
        if target is None:
            raise NotFoundError("File", path)
        await self.storage.delete(path, target)
        removed = await self.assets.delete_by_path(path)
        logger.info(f"Deleted {path} from {target.name} ({removed} asset records)")

    async def get_file_info(self, path: str, disk: Optional[str] = None) -> FileInfo:
        expected = await self._disk_for(path, disk)
        target = await self.storage.locate(path, expected)
        if target is None:
            return FileInfo(path=path, disk=expected.name, exists=False)
        return FileInfo(
            path=path,
            disk=target.name,
            exists=True,
            size=await target.size(path),
            url=await target.get_url(path),
        )

    async def copy_file(self, source_path: str, destination_path: str, disk: Optional[str] = None) -> FileInfo:
        target = await self.storage.locate(source_path, await self._disk_for(source_path, disk))
        if target is None:
            raise NotFoundError("File", source_path)
        data = await self.storage.get(source_path, target)
        await target.put(destination_path, data)
        logger.info(f"Copied {source_path} to {destination_path} on {target.name}")
        return await self.get_file_info(destination_path, target.name)

    # ------------------------------------------------------------------
    # Version assets
    # ------------------------------------------------------------------

    async def _get_version(self, component_id: str, version_id: str):
        version = await self.versions.get_for_component(component_id, version_id)
        if version is None:
            raise NotFoundError("Component version", version_id)
        return version

    async def upload_version_asset(
        self,
        component_id: str,
        version_id: str,
        data: bytes,
        original_name: str,
        mime_type: str,
        user_id: Optional[str] = None,
    ) -> Asset:
        await self._get_version(component_id, version_id)
        _check_size(data, self.config.max_file_size, "File")
        uploaded = await self._store(
            data,
            original_name,
            mime_type,
            f"components/{component_id}/versions/{version_id}/assets",
            unique_filename(original_name),
            user_id=user_id,
            version_id=version_id,
            deduplicate=False,
        )
        asset = await self.assets.get_by_path(uploaded.path)
        if asset is None:
            raise NotFoundError("Asset", uploaded.path)
        return asset

    async def list_version_assets(self, component_id: str, version_id: str) -> List[Asset]:
        await self._get_version(component_id, version_id)
        return await self.assets.list_for_version(version_id)

    async def delete_version_asset(self, component_id: str, version_id: str, asset_id: str) -> None:
        await self._get_version(component_id, version_id)
        asset = await self.assets.get_by_id(asset_id)
        if asset is None or asset.component_version_id != version_id:
            raise NotFoundError("Asset", asset_id)
        await self.storage.delete(asset.path, self.storage.use(asset.disk))
        await self.assets.delete(asset.id)
        logger.info(f"Deleted asset {asset.id} of version {version_id}")
