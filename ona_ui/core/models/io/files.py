"""
File upload and asset I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class UploadedFile(BaseModel):
    """A file stored on a disk."""

    path: str
    url: str
    disk: str
    size: int
    mime_type: str
    hash: str
    original_name: str
    deduplicated: bool = False


class FileInfo(BaseModel):
    path: str
    disk: str
    exists: bool
    size: Optional[int] = None
    url: Optional[str] = None


class AssetRead(BaseModel):
    id: str
    path: str
    disk: str
    url: str
    hash: str
    size: int
    mime_type: str
    original_name: str
    is_public: bool
    component_version_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AssetFile(BaseModel):
    """One entry of a batch upload manifest; ``content`` is base64 encoded."""

    path: str = Field(description="Original relative path, used in error reports")
    content: str
    hash: Optional[str] = Field(default=None, description="Expected sha256 hex digest")
    shared: bool = False
    category: Optional[str] = None
    component_number: Optional[int] = None


class BatchUploadRequest(BaseModel):
    files: List[AssetFile] = Field(min_length=1)
    skip_existing: bool = True
    max_concurrency: int = Field(default=10, ge=1, le=10)
    retry_attempts: int = Field(default=3, ge=1, le=10)


class UploadedAsset(BaseModel):
    original_path: str
    path: str
    url: str
    hash: str
    size: int
    mime_type: str


class BatchUploadResult(BaseModel):
    uploaded_assets: List[UploadedAsset] = Field(default_factory=list)
    skipped_assets: List[UploadedAsset] = Field(default_factory=list)
    total_uploaded: int = 0
    total_skipped: int = 0
    total_size: int = 0
    upload_duration: float = 0.0
    errors: List[str] = Field(default_factory=list)
