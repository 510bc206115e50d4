"""
Authentication session entities.

Sessions back the ``ona-ui.session_token`` cookie; verifications hold the
hashed single-use magic-link tokens.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserSession(Base, table=True):
    """An authenticated browser session.

    Table: sessions
    """

    __tablename__ = "sessions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    token: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class Verification(Base, table=True):
    """A pending magic-link verification.

    ``value`` stores the sha256 digest of the token sent by email, never the
    token itself.

    Table: verifications
    """

    __tablename__ = "verifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    identifier: str = Field(max_length=255, index=True, description="Email the link was sent to")
    value: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
