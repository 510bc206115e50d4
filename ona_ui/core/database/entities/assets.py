"""
Uploaded asset metadata.

Every file pushed to a storage disk is recorded here with its sha256 digest,
which is what upload deduplication looks up.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Asset(Base, table=True):
    """Table: assets"""

    __tablename__ = "assets"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    path: str = Field(max_length=1024, index=True, description="Object key on the disk")
    disk: str = Field(max_length=32)
    url: str = Field(max_length=2048)
    hash: str = Field(max_length=64, index=True, description="sha256 hex digest of the content")
    size: int = Field(default=0)
    mime_type: str = Field(max_length=255)
    original_name: str = Field(max_length=512)
    is_public: bool = Field(default=True)
    component_version_id: Optional[str] = Field(
        default=None, foreign_key="component_versions.id", index=True, max_length=36
    )
    uploaded_by: Optional[str] = Field(default=None, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
