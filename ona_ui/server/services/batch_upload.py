"""
Batch Upload Service.

Uploads a manifest of assets in concurrent batches with hash based
deduplication, sha256 integrity checks and retries with exponential backoff.
"""

from __future__ import annotations

import asyncio
import base64
import time
from collections import defaultdict
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ona_ui.core.errors import ValidationError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.models.io.files import AssetFile, BatchUploadRequest, BatchUploadResult, UploadedAsset
from ona_ui.core.monitoring import log_batch_upload
from ona_ui.core.utils import guess_mime_type, sanitize_filename

from .files import FileService, sha256_hex

logger = get_logger(__name__)

MAX_CONCURRENCY = 10
DEFAULT_RETRY_ATTEMPTS = 3
RETRY_DELAY_BASE = 1.0

SHARED_CACHE_CONTROL = "public, max-age=31536000, immutable"
COMPONENT_CACHE_CONTROL = "public, max-age=3600, stale-while-revalidate=86400"


def asset_folder(asset: AssetFile) -> str:
    if asset.shared:
        return "shared/assets"
    if asset.category and asset.component_number is not None:
        return f"components/{asset.category}/{asset.component_number}/v1.0.0/assets"
    return "assets"


def chunked(items: Sequence[AssetFile], size: int) -> Iterator[Sequence[AssetFile]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def aggregate_results(results: List[BatchUploadResult]) -> BatchUploadResult:
    merged = BatchUploadResult()
    for result in results:
        merged.uploaded_assets.extend(result.uploaded_assets)
        merged.skipped_assets.extend(result.skipped_assets)
        merged.errors.extend(result.errors)
        merged.total_size += result.total_size
        merged.upload_duration += result.upload_duration
    merged.total_uploaded = len(merged.uploaded_assets)
    merged.total_skipped = len(merged.skipped_assets)
    return merged


class BatchUploadService:
    """Service uploading many assets through the file service."""

    def __init__(self, file_service: FileService, retry_delay_base: float = RETRY_DELAY_BASE):
        self.file_service = file_service
        self.retry_delay_base = retry_delay_base

    async def upload(self, request: BatchUploadRequest, user_id: Optional[str] = None) -> BatchUploadResult:
        """Upload a manifest: shared assets first, then component assets grouped by component."""
        shared = [asset for asset in request.files if asset.shared]
        specific = [asset for asset in request.files if not asset.shared]
        options = {
            "skip_existing": request.skip_existing,
            "max_concurrency": request.max_concurrency,
            "retry_attempts": request.retry_attempts,
        }
        results = []
        if shared:
            results.append(await self.upload_shared_assets(shared, user_id, **options))
        if specific:
            results.append(await self.upload_component_assets(specific, user_id, **options))
        return aggregate_results(results)

    async def upload_shared_assets(self, assets: List[AssetFile], user_id: Optional[str] = None, **options) -> BatchUploadResult:
        logger.info(f"Uploading {len(assets)} shared assets")
        return await self.upload_assets(assets, user_id, cache_control=SHARED_CACHE_CONTROL, **options)

    async def upload_component_assets(
        self, assets: List[AssetFile], user_id: Optional[str] = None, **options
    ) -> BatchUploadResult:
        groups: Dict[Tuple[Optional[str], Optional[int]], List[AssetFile]] = defaultdict(list)
        for asset in assets:
            groups[(asset.category, asset.component_number)].append(asset)

        logger.info(f"Uploading {len(assets)} component assets for {len(groups)} components")
        results = []
        for group in groups.values():
            results.append(await self.upload_assets(group, user_id, cache_control=COMPONENT_CACHE_CONTROL, **options))
        return aggregate_results(results)

    async def upload_assets(
        self,
        assets: List[AssetFile],
        user_id: Optional[str] = None,
        skip_existing: bool = True,
        max_concurrency: int = MAX_CONCURRENCY,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        cache_control: Optional[str] = None,
    ) -> BatchUploadResult:
        """
        Upload assets in batches of ``max_concurrency`` (capped at 10).

        Failures never abort the batch: each one is reported in ``errors``
        as ``"<path>: <error>"``.
        """
        started = time.perf_counter()
        concurrency = max(1, min(max_concurrency, MAX_CONCURRENCY))
        result = BatchUploadResult()

        for batch in chunked(assets, concurrency):
            outcomes = await asyncio.gather(
                *(
                    self._upload_single(asset, user_id, skip_existing, retry_attempts, cache_control)
                    for asset in batch
                ),
                return_exceptions=True,
            )
            for asset, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Upload of {asset.path} failed: {outcome}")
                    result.errors.append(f"{asset.path}: {outcome}")
                    continue
                uploaded, item = outcome
                if uploaded:
                    result.uploaded_assets.append(item)
                else:
                    result.skipped_assets.append(item)

        result.total_uploaded = len(result.uploaded_assets)
        result.total_skipped = len(result.skipped_assets)
        result.total_size = sum(item.size for item in result.uploaded_assets)
        result.upload_duration = time.perf_counter() - started

        logger.info(
            f"Batch upload done: {result.total_uploaded} uploaded, {result.total_skipped} skipped, "
            f"{len(result.errors)} errors in {result.upload_duration:.2f}s"
        )
        log_batch_upload(
            result.total_uploaded,
            result.total_skipped,
            len(result.errors),
            result.upload_duration * 1000,
            result.total_size,
        )
        return result

    async def _upload_single(
        self,
        asset: AssetFile,
        user_id: Optional[str],
        skip_existing: bool,
        retry_attempts: int,
        cache_control: Optional[str],
    ) -> Tuple[bool, UploadedAsset]:
        data = base64.b64decode(asset.content, validate=True)
        digest = sha256_hex(data)
        if asset.hash and asset.hash.lower() != digest:
            raise ValidationError("Hash mismatch", details={"expected": asset.hash, "actual": digest})

        if skip_existing:
            existing = await self.file_service.find_by_hash(digest)
            if existing is not None:
                return False, UploadedAsset(
                    original_path=asset.path,
                    path=existing.path,
                    url=existing.url,
                    hash=existing.hash,
                    size=existing.size,
                    mime_type=existing.mime_type,
                )

        filename = sanitize_filename(PurePosixPath(asset.path).name)
        mime_type = guess_mime_type(filename)
        uploaded = await self._upload_with_retry(
            data, filename, mime_type, asset_folder(asset), user_id, retry_attempts, cache_control
        )
        return True, UploadedAsset(
            original_path=asset.path,
            path=uploaded.path,
            url=uploaded.url,
            hash=uploaded.hash,
            size=uploaded.size,
            mime_type=uploaded.mime_type,
        )

    async def _upload_with_retry(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        folder: str,
        user_id: Optional[str],
        retry_attempts: int,
        cache_control: Optional[str],
    ):
        last_error: Optional[Exception] = None
        for attempt in range(1, retry_attempts + 1):
            try:
                return await self.file_service.upload_file_with_preserved_name(
                    data,
                    filename,
                    mime_type,
                    user_id=user_id,
                    folder=folder,
                    public=True,
                    cache_control=cache_control,
                )
            except Exception as e:
                last_error = e
                if attempt < retry_attempts:
                    delay = self.retry_delay_base * 2 ** (attempt - 1)
                    logger.warning(f"Upload of {folder}/{filename} failed (attempt {attempt}), retrying in {delay}s: {e}")
                    await asyncio.sleep(delay)
        raise last_error
