"""
Unit tests for magic-link sign-in and session resolution.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from sqlalchemy import select

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import Account, UserSession, Verification
from ona_ui.core.errors import ServiceError, UnauthorizedError
from ona_ui.server.core.config import AuthConfig
from ona_ui.server.services.auth import MAGIC_LINK_PATH, AuthService, hash_token

pytestmark = pytest.mark.asyncio


@pytest.fixture
def email_service():
    service = Mock()
    service.send_magic_link_email = AsyncMock(return_value={"id": "email_1"})
    return service


@pytest.fixture
def auth(session, email_service):
    return AuthService(session, email_service=email_service, config=AuthConfig(frontend_url="https://ona-ui.com/"))


def token_from(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


class TestMagicLink:
    async def test_issue_stores_only_the_hash(self, auth, session):
        url = await auth.issue_magic_link("Member@Ona-UI.com", callback_url="/dashboard")

        assert url.startswith(f"https://ona-ui.com{MAGIC_LINK_PATH}?")
        token = token_from(url)
        assert parse_qs(urlparse(url).query)["callbackURL"] == ["/dashboard"]
        stored = (await session.execute(select(Verification))).scalars().one()
        assert stored.identifier == "member@ona-ui.com"
        assert stored.value == hash_token(token)
        assert stored.value != token

    async def test_new_link_replaces_pending_one(self, auth, session):
        first = token_from(await auth.issue_magic_link("member@ona-ui.com"))
        await auth.issue_magic_link("member@ona-ui.com")

        with pytest.raises(UnauthorizedError):
            await auth.verify_magic_link(first)

    async def test_request_for_unknown_email_sends_nothing(self, auth, email_service):
        assert await auth.request_magic_link("nobody@example.com") is False
        email_service.send_magic_link_email.assert_not_called()

    async def test_request_for_known_user(self, auth, email_service, regular_user):
        assert await auth.request_magic_link(regular_user.email) is True

        email_service.send_magic_link_email.assert_awaited_once()
        assert email_service.send_magic_link_email.call_args.args[0] == regular_user.email

    async def test_provider_failure_is_bad_gateway(self, auth, email_service, regular_user):
        email_service.send_magic_link_email.side_effect = httpx.ConnectError("down")

        with pytest.raises(ServiceError) as exc_info:
            await auth.request_magic_link(regular_user.email)

        assert exc_info.value.status_code == 502
        assert exc_info.value.code == "EMAIL_SEND_FAILED"

    async def test_verify_opens_session_once(self, auth, session, regular_user):
        token = token_from(await auth.issue_magic_link(regular_user.email))

        user, user_session = await auth.verify_magic_link(token, ip_address="127.0.0.1")

        assert user.id == regular_user.id
        assert user_session.ip_address == "127.0.0.1"
        assert user.last_login_at is not None
        accounts = (await session.execute(select(Account).where(Account.user_id == user.id))).scalars().all()
        assert [account.provider_id for account in accounts] == ["email"]
        with pytest.raises(UnauthorizedError):
            await auth.verify_magic_link(token)

    async def test_expired_link_is_rejected(self, auth, session, regular_user):
        token = token_from(await auth.issue_magic_link(regular_user.email))
        verification = (await session.execute(select(Verification))).scalars().one()
        verification.expires_at = utc_now() - timedelta(seconds=1)
        await session.commit()

        with pytest.raises(UnauthorizedError):
            await auth.verify_magic_link(token)


class TestSessions:
    async def test_resolve_known_token(self, auth, regular_user):
        user, user_session = await auth.resolve_session("user-session-token")

        assert user.id == regular_user.id
        assert user_session.token == "user-session-token"

    async def test_resolve_expired_or_missing(self, auth, session, regular_user):
        user_session = (
            await session.execute(select(UserSession).where(UserSession.token == "user-session-token"))
        ).scalars().one()
        user_session.expires_at = utc_now() - timedelta(minutes=1)
        await session.commit()

        assert await auth.resolve_session("user-session-token") is None
        assert await auth.resolve_session(None) is None
        assert await auth.resolve_session("unknown") is None

    async def test_sign_out(self, auth, regular_user):
        assert await auth.sign_out("user-session-token") is True
        assert await auth.resolve_session("user-session-token") is None
        assert await auth.sign_out("user-session-token") is False

    async def test_deleted_user_session_resolves_to_none(self, auth, session, regular_user):
        regular_user.deleted_at = utc_now()
        session.add(regular_user)
        await session.commit()

        assert await auth.resolve_session("user-session-token") is None
