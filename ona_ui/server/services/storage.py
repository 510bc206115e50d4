"""
Storage disks.

Named storage backends with one async interface (``put``, ``get``,
``delete``, ``exists``, ``get_url``, ``size``):

- ``fs``: private local folder
- ``public``: local folder served under a URL prefix
- ``s3`` / ``s3_private``: AWS S3 buckets
- ``r2`` / ``r2_private``: Cloudflare R2 buckets (S3 compatible)

``STORAGE_PROVIDER`` picks the disks used for uploads. ``dual`` writes to R2
and mirrors to S3; writes and reads fall back to S3 when R2 fails.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ona_ui.core.errors import ServiceError
from ona_ui.core.logging_config import get_logger
from ona_ui.server.core.config import R2Config, S3Config, StorageConfig, settings

logger = get_logger(__name__)

PRESIGNED_URL_TTL = 3600

# STORAGE_PROVIDER -> (public disk, private disk)
PROVIDER_DISKS: Dict[str, Tuple[str, str]] = {
    "r2": ("r2", "r2_private"),
    "s3": ("s3", "s3_private"),
    "fs": ("public", "fs"),
    "dual": ("r2", "r2_private"),
}
# dual mode: R2 disk -> S3 disk holding its mirror copies
MIRROR_DISKS: Dict[str, str] = {"r2": "s3", "r2_private": "s3_private"}


class StorageError(ServiceError):
    def __init__(self, message: str, disk: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="STORAGE_ERROR", status_code=500, details={"disk": disk, "path": path})


class Disk(ABC):
    """A storage backend addressed by relative object paths."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def put(
        self, path: str, data: bytes, content_type: Optional[str] = None, cache_control: Optional[str] = None
    ) -> None: ...

    @abstractmethod
    async def get(self, path: str) -> bytes: ...

    @abstractmethod
    async def delete(self, path: str) -> bool: ...

    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @abstractmethod
    async def get_url(self, path: str) -> str: ...

    @abstractmethod
    async def size(self, path: str) -> int: ...


class LocalDisk(Disk):
    """Disk stored in a local folder."""

    def __init__(self, name: str, root: Path, url_prefix: Optional[str] = None) -> None:
        super().__init__(name)
        self.root = root
        self.url_prefix = url_prefix

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise StorageError("Path escapes the storage root", self.name, path)
        return target

    async def put(
        self, path: str, data: bytes, content_type: Optional[str] = None, cache_control: Optional[str] = None
    ) -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await asyncio.to_thread(_write)

    async def get(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as e:
            raise StorageError("File not found", self.name, path) from e

    async def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            return False
        await asyncio.to_thread(target.unlink)
        return True

    async def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def get_url(self, path: str) -> str:
        if self.url_prefix is None:
            return f"file://{self._resolve(path)}"
        return f"{self.url_prefix.rstrip('/')}/{path.lstrip('/')}"

    async def size(self, path: str) -> int:
        target = self._resolve(path)
        if not target.is_file():
            raise StorageError("File not found", self.name, path)
        return target.stat().st_size


class S3Disk(Disk):
    """Disk backed by an S3 compatible bucket."""

    def __init__(
        self,
        name: str,
        bucket: Optional[str],
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        public_base_url: Optional[str] = None,
        is_public: bool = True,
    ) -> None:
        super().__init__(name)
        self.bucket = bucket
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.region = region
        self.endpoint = endpoint
        self.public_base_url = public_base_url
        self.is_public = is_public
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.bucket and self.access_key_id and self.secret_access_key)

    def _get_client(self):
        if not self.configured:
            raise StorageError(f"Disk '{self.name}' is not configured", self.name)
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint,
                region_name=self.region,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                config=Config(signature_version="s3v4", retries={"max_attempts": 3}),
            )
        return self._client

    async def _call(self, operation: str, path: str, **kwargs):
        client = self._get_client()
        try:
            return await asyncio.to_thread(getattr(client, operation), Bucket=self.bucket, Key=path, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{self.name}: {operation} {path} failed: {e}")
            raise StorageError(f"Storage operation '{operation}' failed: {e}", self.name, path) from e

    async def put(
        self, path: str, data: bytes, content_type: Optional[str] = None, cache_control: Optional[str] = None
    ) -> None:
        extra = {}
        if content_type:
            extra["ContentType"] = content_type
        if cache_control:
            extra["CacheControl"] = cache_control
        await self._call("put_object", path, Body=data, **extra)

    async def get(self, path: str) -> bytes:
        response = await self._call("get_object", path)
        return await asyncio.to_thread(response["Body"].read)

    async def delete(self, path: str) -> bool:
        if not await self.exists(path):
            return False
        await self._call("delete_object", path)
        return True

    async def _head(self, path: str) -> Optional[dict]:
        client = self._get_client()
        try:
            return await asyncio.to_thread(client.head_object, Bucket=self.bucket, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return None
            raise StorageError(f"Storage operation 'head_object' failed: {e}", self.name, path) from e

    async def exists(self, path: str) -> bool:
        return await self._head(path) is not None

    async def get_url(self, path: str) -> str:
        if not self.is_public:
            client = self._get_client()
            return await asyncio.to_thread(
                client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": path},
                ExpiresIn=PRESIGNED_URL_TTL,
            )
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"

    async def size(self, path: str) -> int:
        head = await self._head(path)
        if head is None:
            raise StorageError("File not found", self.name, path)
        return int(head.get("ContentLength", 0))


class StorageManager:
    """Registry of the configured disks and the upload strategy."""

    def __init__(
        self,
        storage: Optional[StorageConfig] = None,
        s3: Optional[S3Config] = None,
        r2: Optional[R2Config] = None,
        disks: Optional[Dict[str, Disk]] = None,
    ) -> None:
        self.config = storage or settings.storage
        if self.config.provider not in PROVIDER_DISKS:
            raise ValueError(f"Unknown STORAGE_PROVIDER '{self.config.provider}'")
        self.disks = disks if disks is not None else self._build_disks(s3 or settings.s3, r2 or settings.r2)

    def _build_disks(self, s3: S3Config, r2: R2Config) -> Dict[str, Disk]:
        root = Path(self.config.local_root)
        return {
            "fs": LocalDisk("fs", root / "private"),
            "public": LocalDisk("public", root / "public", url_prefix=self.config.public_url_prefix),
            "s3": S3Disk(
                "s3", s3.bucket, s3.access_key_id, s3.secret_access_key, s3.region, s3.endpoint, s3.cdn_url
            ),
            "s3_private": S3Disk(
                "s3_private",
                s3.private_bucket,
                s3.access_key_id,
                s3.secret_access_key,
                s3.region,
                s3.endpoint,
                is_public=False,
            ),
            "r2": S3Disk(
                "r2", r2.bucket, r2.access_key_id, r2.secret_access_key, "auto", r2.resolved_endpoint, r2.cdn_url
            ),
            "r2_private": S3Disk(
                "r2_private",
                r2.private_bucket,
                r2.access_key_id,
                r2.secret_access_key,
                "auto",
                r2.resolved_endpoint,
                is_public=False,
            ),
        }

    def use(self, name: Optional[str] = None) -> Disk:
        disk_name = name or self.config.default_disk
        disk = self.disks.get(disk_name)
        if disk is None:
            raise StorageError(f"Unknown disk '{disk_name}'", disk_name)
        return disk

    def upload_disk(self, public: bool = True) -> Disk:
        public_disk, private_disk = PROVIDER_DISKS[self.config.provider]
        return self.use(public_disk if public else private_disk)

    def mirror_disk(self, disk: Disk) -> Optional[Disk]:
        """S3 counterpart of an R2 disk in ``dual`` mode, otherwise None."""
        if self.config.provider != "dual" or disk.name not in MIRROR_DISKS:
            return None
        return self.use(MIRROR_DISKS[disk.name])

    async def put(
        self,
        path: str,
        data: bytes,
        public: bool = True,
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> Disk:
        """Write to the upload disk; returns the disk that stored the file.

        In ``dual`` mode a successful R2 write is mirrored to S3 and a failed
        one falls back to S3. A failed mirror write only logs a warning.
        """
        disk = self.upload_disk(public)
        mirror = self.mirror_disk(disk)
        try:
            await disk.put(path, data, content_type, cache_control)
        except StorageError as e:
            if mirror is None:
                raise
            logger.warning(f"Upload of {path} to {disk.name} failed ({e.message}), falling back to {mirror.name}")
            await mirror.put(path, data, content_type, cache_control)
            return mirror

        if mirror is not None:
            try:
                await mirror.put(path, data, content_type, cache_control)
            except StorageError as e:
                logger.warning(f"Mirroring {path} to {mirror.name} failed: {e.message}")
        return disk

    async def locate(self, path: str, disk: Optional[Disk] = None) -> Optional[Disk]:
        """Disk holding ``path``, or None.

        The S3 mirror of an R2 disk is tried when R2 misses the file or fails.
        """
        disk = disk or self.upload_disk()
        mirror = self.mirror_disk(disk)
        if mirror is None:
            return disk if await disk.exists(path) else None
        primary_failed = False
        try:
            if await disk.exists(path):
                return disk
        except StorageError as e:
            primary_failed = True
            logger.warning(f"Lookup of {path} on {disk.name} failed ({e.message}), trying {mirror.name}")
        try:
            return mirror if await mirror.exists(path) else None
        except StorageError as e:
            if primary_failed:
                raise
            logger.warning(f"Lookup of {path} on {mirror.name} failed: {e.message}")
            return None

    async def exists(self, path: str, disk: Optional[Disk] = None) -> bool:
        return await self.locate(path, disk) is not None

    async def get(self, path: str, disk: Optional[Disk] = None) -> bytes:
        disk = disk or self.upload_disk()
        found = await self.locate(path, disk)
        if found is None:
            raise StorageError("File not found", disk.name, path)
        try:
            return await found.get(path)
        except StorageError as e:
            mirror = self.mirror_disk(found)
            if mirror is None:
                raise
            logger.warning(f"Read of {path} from {found.name} failed ({e.message}), reading {mirror.name}")
            return await mirror.get(path)

    async def delete(self, path: str, disk: Disk) -> bool:
        """Delete ``path`` from ``disk`` and from its S3 mirror; the mirror is best effort."""
        deleted = await disk.delete(path)
        mirror = self.mirror_disk(disk)
        if mirror is not None:
            try:
                await mirror.delete(path)
            except StorageError as e:
                logger.warning(f"Deleting mirrored {path} from {mirror.name} failed: {e.message}")
        return deleted


_manager: Optional[StorageManager] = None


def get_storage() -> StorageManager:
    global _manager
    if _manager is None:
        _manager = StorageManager()
    return _manager
