"""
Authentication Service.

Passwordless sign-in through single-use magic links and the sessions that
back the ``ona-ui.session_token`` cookie.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta
from typing import Optional, Tuple
from urllib.parse import urlencode

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import AuthProvider, User, UserSession, Verification
from ona_ui.core.database.repositories import (
    AccountRepository,
    UserRepository,
    UserSessionRepository,
    VerificationRepository,
)
from ona_ui.core.errors import ServiceError, UnauthorizedError
from ona_ui.core.logging_config import get_logger
from ona_ui.server.core.config import AuthConfig, settings

from .email import EmailService

logger = get_logger(__name__)

MAGIC_LINK_PATH = "/auth/magic-link/verify"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Service for magic-link sign-in and session management."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: Optional[EmailService] = None,
        config: Optional[AuthConfig] = None,
    ):
        self.session = session
        self.config = config or settings.auth
        self.email_service = email_service or EmailService()
        self.users = UserRepository(session)
        self.accounts = AccountRepository(session)
        self.sessions = UserSessionRepository(session)
        self.verifications = VerificationRepository(session)

    async def issue_magic_link(self, email: str, callback_url: Optional[str] = None) -> str:
        """Store a fresh hashed token for ``email`` and return the sign-in URL.

        Previous pending links of the same email stop working.
        """
        identifier = email.strip().lower()
        token = secrets.token_urlsafe(32)
        await self.verifications.delete_for_identifier(identifier)
        await self.verifications.create(
            Verification(
                identifier=identifier,
                value=hash_token(token),
                expires_at=utc_now() + timedelta(seconds=self.config.magic_link_ttl_seconds),
            )
        )
        query = {"token": token}
        if callback_url:
            query["callbackURL"] = callback_url
        return f"{self.config.frontend_url.rstrip('/')}{MAGIC_LINK_PATH}?{urlencode(query)}"

    async def request_magic_link(self, email: str, callback_url: Optional[str] = None) -> bool:
        """
        Email a sign-in link to a known user.

        Sign-up through magic links is disabled: unknown or deleted accounts
        get no email, and callers answer with the same generic message.

        Returns:
            True when a link was sent.
        """
        user = await self.users.get_by_email(email)
        if user is None or user.is_deleted:
            logger.info("Magic link requested for an unknown email, ignoring")
            return False

        url = await self.issue_magic_link(user.email, callback_url)
        try:
            await self.email_service.send_magic_link_email(user.email, url, self.config.magic_link_ttl_seconds)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send magic link to user {user.id}: {e}")
            raise ServiceError("Could not send the sign-in email", code="EMAIL_SEND_FAILED", status_code=502) from e
        logger.info(f"Magic link sent to user {user.id}")
        return True

    async def verify_magic_link(
        self, token: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> Tuple[User, UserSession]:
        """
        Consume a magic-link token and open a session.

        Raises:
            UnauthorizedError: The token is unknown, already used or expired.
        """
        verification = await self.verifications.get_by_value(hash_token(token))
        if verification is None:
            raise UnauthorizedError("Invalid or expired magic link")
        await self.verifications.delete(verification.id)
        if verification.expires_at <= utc_now():
            raise UnauthorizedError("Invalid or expired magic link")

        user = await self.users.get_by_email(verification.identifier)
        if user is None or user.is_deleted:
            raise UnauthorizedError("Invalid or expired magic link")

        if not user.email_verified:
            user.email_verified = True
            user.email_verified_at = utc_now()
        await self.accounts.ensure(user.id, AuthProvider.EMAIL.value, user.email)
        user_session = await self.create_session(user, ip_address, user_agent)
        await self.users.update_last_login(user)
        logger.info(f"User {user.id} signed in with a magic link")
        return user, user_session

    async def create_session(
        self, user: User, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> UserSession:
        return await self.sessions.create(
            UserSession(
                token=secrets.token_urlsafe(32),
                expires_at=utc_now() + timedelta(seconds=self.config.session_ttl_seconds),
                ip_address=ip_address,
                user_agent=user_agent,
                user_id=user.id,
            )
        )

    async def resolve_session(self, token: Optional[str]) -> Optional[Tuple[User, UserSession]]:
        """Return the user behind a session token.

        Expired or unknown tokens and sessions of soft deleted users resolve to None.
        """
        if not token:
            return None
        user_session = await self.sessions.get_by_token(token)
        if user_session is None or user_session.is_expired(utc_now()):
            return None
        user = await self.users.get_by_id(user_session.user_id)
        if user is None or user.is_deleted:
            return None
        return user, user_session

    async def sign_out(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return await self.sessions.delete_by_token(token)
