"""
Unit tests for the batch upload service.

The file service is mocked; these tests cover deduplication, integrity
checks, retries and result aggregation.
"""

import base64
import hashlib
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from ona_ui.core.models.io.files import AssetFile, BatchUploadRequest, UploadedFile
from ona_ui.server.services.batch_upload import (
    COMPONENT_CACHE_CONTROL,
    SHARED_CACHE_CONTROL,
    BatchUploadService,
    asset_folder,
    chunked,
)

pytestmark = pytest.mark.asyncio


def make_asset(path: str, data: bytes, **fields) -> AssetFile:
    return AssetFile(
        path=path,
        content=base64.b64encode(data).decode("ascii"),
        hash=hashlib.sha256(data).hexdigest(),
        **fields,
    )


def stored(folder: str, filename: str, data: bytes, mime_type: str) -> UploadedFile:
    return UploadedFile(
        path=f"{folder}/{filename}",
        url=f"https://cdn.example.com/{folder}/{filename}",
        disk="r2",
        size=len(data),
        mime_type=mime_type,
        hash=hashlib.sha256(data).hexdigest(),
        original_name=filename,
    )


@pytest.fixture
def file_service():
    service = Mock()
    service.find_by_hash = AsyncMock(return_value=None)

    async def upload(data, filename, mime_type, user_id=None, folder="", public=True, cache_control=None):
        return stored(folder, filename, data, mime_type)

    service.upload_file_with_preserved_name = AsyncMock(side_effect=upload)
    return service


class TestHelpers:
    async def test_asset_folder(self):
        assert asset_folder(make_asset("logo.svg", b"x", shared=True)) == "shared/assets"
        assert (
            asset_folder(make_asset("hero.png", b"x", category="marketing", component_number=3))
            == "components/marketing/3/v1.0.0/assets"
        )
        assert asset_folder(make_asset("loose.png", b"x")) == "assets"

    async def test_chunked(self):
        assets = [make_asset(f"{i}.png", b"x") for i in range(5)]

        assert [len(chunk) for chunk in chunked(assets, 2)] == [2, 2, 1]


class TestBatchUpload:
    async def test_uploads_shared_and_component_assets(self, file_service):
        request = BatchUploadRequest(
            files=[
                make_asset("shared/logo.svg", b"<svg/>", shared=True),
                make_asset("marketing/1/hero.png", b"png-1", category="marketing", component_number=1),
                make_asset("marketing/2/hero.png", b"png-2", category="marketing", component_number=2),
            ]
        )

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(request, user_id="u1")

        assert result.total_uploaded == 3
        assert result.total_skipped == 0
        assert result.errors == []
        assert result.total_size == len(b"<svg/>") + len(b"png-1") + len(b"png-2")
        cache_controls = [call.kwargs["cache_control"] for call in file_service.upload_file_with_preserved_name.call_args_list]
        assert cache_controls[0] == SHARED_CACHE_CONTROL
        assert cache_controls[1:] == [COMPONENT_CACHE_CONTROL, COMPONENT_CACHE_CONTROL]

    async def test_existing_hash_is_skipped(self, file_service):
        data = b"already there"
        file_service.find_by_hash.return_value = SimpleNamespace(
            path="assets/old.png",
            url="https://cdn.example.com/assets/old.png",
            hash=hashlib.sha256(data).hexdigest(),
            size=len(data),
            mime_type="image/png",
        )

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(
            BatchUploadRequest(files=[make_asset("old.png", data)])
        )

        assert result.total_skipped == 1
        assert result.skipped_assets[0].path == "assets/old.png"
        file_service.upload_file_with_preserved_name.assert_not_called()

    async def test_skip_existing_disabled_uploads_again(self, file_service):
        file_service.find_by_hash.return_value = SimpleNamespace()

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(
            BatchUploadRequest(files=[make_asset("again.png", b"data")], skip_existing=False)
        )

        assert result.total_uploaded == 1
        file_service.find_by_hash.assert_not_called()

    async def test_hash_mismatch_is_reported(self, file_service):
        asset = make_asset("broken.png", b"real content")
        asset.hash = "0" * 64

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(BatchUploadRequest(files=[asset]))

        assert result.total_uploaded == 0
        assert len(result.errors) == 1
        assert result.errors[0].startswith("broken.png: ")

    async def test_transient_failure_is_retried(self, file_service):
        data = b"flaky"
        file_service.upload_file_with_preserved_name.side_effect = [
            ConnectionError("reset"),
            stored("assets", "flaky.png", data, "image/png"),
        ]

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(
            BatchUploadRequest(files=[make_asset("flaky.png", data)])
        )

        assert result.total_uploaded == 1
        assert file_service.upload_file_with_preserved_name.await_count == 2

    async def test_persistent_failure_does_not_abort_batch(self, file_service):
        good = b"good"

        async def upload(data, filename, mime_type, **kwargs):
            if filename == "bad.png":
                raise ConnectionError("unreachable")
            return stored(kwargs["folder"], filename, data, mime_type)

        file_service.upload_file_with_preserved_name.side_effect = upload
        request = BatchUploadRequest(
            files=[make_asset("bad.png", b"bad"), make_asset("good.png", good)], retry_attempts=2
        )

        result = await BatchUploadService(file_service, retry_delay_base=0).upload(request)

        assert result.total_uploaded == 1
        assert result.errors == ["bad.png: unreachable"]
        # two attempts for the failing file, one for the good one
        assert file_service.upload_file_with_preserved_name.await_count == 3
