"""
Unit tests for storage disks, the upload strategy and dual mode reads.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from ona_ui.server.core.config import StorageConfig
from ona_ui.server.services.storage import LocalDisk, StorageError, StorageManager

pytestmark = pytest.mark.asyncio


def fake_disk(name: str) -> Mock:
    disk = Mock()
    disk.name = name
    disk.put = AsyncMock()
    return disk


class TestLocalDisk:
    async def test_put_get_delete(self, tmp_path):
        disk = LocalDisk("public", tmp_path, url_prefix="/uploads/")

        await disk.put("components/hero.png", b"png")

        assert await disk.exists("components/hero.png")
        assert await disk.get("components/hero.png") == b"png"
        assert await disk.size("components/hero.png") == 3
        assert await disk.get_url("components/hero.png") == "/uploads/components/hero.png"
        assert await disk.delete("components/hero.png") is True
        assert await disk.delete("components/hero.png") is False

    async def test_missing_file(self, tmp_path):
        disk = LocalDisk("fs", tmp_path)

        with pytest.raises(StorageError) as exc_info:
            await disk.get("nope.txt")

        assert exc_info.value.details == {"disk": "fs", "path": "nope.txt"}

    async def test_path_cannot_escape_root(self, tmp_path):
        disk = LocalDisk("fs", tmp_path / "private")

        with pytest.raises(StorageError):
            await disk.put("../outside.txt", b"x")

    async def test_private_url_points_to_file(self, tmp_path):
        disk = LocalDisk("fs", tmp_path)

        assert (await disk.get_url("a.txt")).startswith("file://")


class TestStorageManager:
    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            StorageManager(storage=StorageConfig(provider="ftp"), disks={})

    def test_fs_provider_disks(self, tmp_path):
        manager = StorageManager(storage=StorageConfig(provider="fs", local_root=str(tmp_path)))

        assert manager.upload_disk(public=True).name == "public"
        assert manager.upload_disk(public=False).name == "fs"

    def test_unknown_disk(self, tmp_path):
        manager = StorageManager(storage=StorageConfig(provider="fs", local_root=str(tmp_path)))

        with pytest.raises(StorageError):
            manager.use("gcs")

    async def test_dual_falls_back_to_s3(self):
        r2, s3 = fake_disk("r2"), fake_disk("s3")
        r2.put.side_effect = StorageError("R2 unavailable", "r2", "a.png")
        manager = StorageManager(storage=StorageConfig(provider="dual"), disks={"r2": r2, "s3": s3})

        used = await manager.put("a.png", b"data", content_type="image/png")

        assert used is s3
        s3.put.assert_awaited_once_with("a.png", b"data", "image/png", None)

    async def test_single_provider_does_not_fall_back(self):
        r2 = fake_disk("r2")
        r2.put.side_effect = StorageError("R2 unavailable", "r2", "a.png")
        manager = StorageManager(storage=StorageConfig(provider="r2"), disks={"r2": r2, "s3": fake_disk("s3")})

        with pytest.raises(StorageError):
            await manager.put("a.png", b"data")


@pytest.fixture
def dual(tmp_path):
    disks = {
        "r2": LocalDisk("r2", tmp_path / "r2"),
        "r2_private": LocalDisk("r2_private", tmp_path / "r2_private"),
        "s3": LocalDisk("s3", tmp_path / "s3"),
        "s3_private": LocalDisk("s3_private", tmp_path / "s3_private"),
    }
    return StorageManager(storage=StorageConfig(provider="dual"), disks=disks)


class TestDualMode:
    async def test_upload_is_mirrored_to_s3(self, dual):
        used = await dual.put("a.png", b"data", content_type="image/png")

        assert used.name == "r2"
        assert await dual.use("r2").get("a.png") == b"data"
        assert await dual.use("s3").get("a.png") == b"data"

    async def test_private_upload_is_mirrored_to_private_bucket(self, dual):
        used = await dual.put("license.zip", b"zip", public=False)

        assert used.name == "r2_private"
        assert await dual.use("s3_private").exists("license.zip")
        assert not await dual.use("s3").exists("license.zip")

    async def test_mirror_failure_is_tolerated(self):
        r2, s3 = fake_disk("r2"), fake_disk("s3")
        s3.put.side_effect = StorageError("S3 unavailable", "s3", "a.png")
        manager = StorageManager(storage=StorageConfig(provider="dual"), disks={"r2": r2, "s3": s3})

        used = await manager.put("a.png", b"data")

        assert used is r2
        r2.put.assert_awaited_once_with("a.png", b"data", None, None)
        s3.put.assert_awaited_once()

    async def test_read_falls_back_when_r2_misses(self, dual):
        await dual.use("s3").put("legacy.png", b"old")

        assert (await dual.locate("legacy.png")).name == "s3"
        assert await dual.exists("legacy.png") is True
        assert await dual.get("legacy.png") == b"old"

    async def test_read_falls_back_when_r2_fails(self):
        r2, s3 = fake_disk("r2"), fake_disk("s3")
        r2.exists = AsyncMock(side_effect=StorageError("R2 unavailable", "r2", "a.png"))
        s3.exists = AsyncMock(return_value=True)
        s3.get = AsyncMock(return_value=b"data")
        manager = StorageManager(storage=StorageConfig(provider="dual"), disks={"r2": r2, "s3": s3})

        assert await manager.exists("a.png") is True
        assert await manager.get("a.png") == b"data"

    async def test_missing_everywhere(self, dual):
        assert await dual.locate("nothing.png") is None
        with pytest.raises(StorageError):
            await dual.get("nothing.png")

    async def test_delete_removes_mirror_copy(self, dual):
        disk = await dual.put("a.png", b"data")

        assert await dual.delete("a.png", disk) is True
        assert not await dual.use("s3").exists("a.png")

    async def test_single_provider_reads_do_not_fall_back(self, tmp_path):
        disks = {"r2": LocalDisk("r2", tmp_path / "r2"), "s3": LocalDisk("s3", tmp_path / "s3")}
        manager = StorageManager(storage=StorageConfig(provider="r2"), disks=disks)
        await disks["s3"].put("legacy.png", b"old")

        assert await manager.exists("legacy.png") is False
