"""
API Dependencies.

Database session, service factories and the authentication guards shared by
the routers. The session token comes from the ``ona-ui.session_token``
cookie or an ``Authorization: Bearer`` header.
"""

from dataclasses import dataclass
from typing import Annotated, Optional, Tuple

from fastapi import Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database import get_session
from ona_ui.core.database.entities import User, UserSession
from ona_ui.core.errors import ForbiddenError, UnauthorizedError
from ona_ui.server.core.config import settings
from ona_ui.server.core.constant import (
    ADMIN_MAX_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    PUBLIC_CACHE_TTL,
    PUBLIC_CACHE_TTL_SHORT,
    PUBLIC_MAX_PAGE_SIZE,
)
from ona_ui.server.services.auth import AuthService
from ona_ui.server.services.email import EmailService, get_email_service
from ona_ui.server.services.files import FileService
from ona_ui.server.services.storage import StorageManager, get_storage
from ona_ui.server.services.stripe_client import StripeService, get_stripe_service

SessionDep = Annotated[AsyncSession, Depends(get_session)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
StripeServiceDep = Annotated[StripeService, Depends(get_stripe_service)]
StorageDep = Annotated[StorageManager, Depends(get_storage)]


def get_file_service(session: SessionDep, storage: StorageDep) -> FileService:
    return FileService(session, storage=storage)


FileServiceDep = Annotated[FileService, Depends(get_file_service)]


def get_session_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.auth.session_cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def get_auth_context(
    session: SessionDep, email_service: EmailServiceDep, token: Optional[str] = Depends(get_session_token)
) -> Optional[Tuple[User, UserSession]]:
    return await AuthService(session, email_service=email_service).resolve_session(token)


AuthContextDep = Annotated[Optional[Tuple[User, UserSession]], Depends(get_auth_context)]


async def get_optional_user(context: AuthContextDep) -> Optional[User]:
    """Signed-in user, or None for anonymous requests."""
    if context is None:
        return None
    return context[0]


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise UnauthorizedError()
    return user


async def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if user.is_deleted:
        raise ForbiddenError("Account is deactivated")
    if not user.is_admin:
        raise ForbiddenError("Administrator access required")
    return user


OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
AdminUserDep = Annotated[User, Depends(get_admin_user)]


@dataclass
class PageParams:
    page: int
    limit: int
    sort_by: Optional[str]
    sort_order: str


def admin_page_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=ADMIN_MAX_PAGE_SIZE, description="Items per page"),
    sort_by: Optional[str] = Query(None, description="Field to sort by"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
) -> PageParams:
    return PageParams(page, limit, sort_by, sort_order)


def public_page_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=PUBLIC_MAX_PAGE_SIZE, description="Items per page"),
    sort_by: Optional[str] = Query(None, description="Field to sort by"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
) -> PageParams:
    return PageParams(page, limit, sort_by, sort_order)


AdminPageDep = Annotated[PageParams, Depends(admin_page_params)]
PublicPageDep = Annotated[PageParams, Depends(public_page_params)]


def public_cache(response: Response) -> None:
    """Mark a public catalog response cacheable."""
    response.headers["Cache-Control"] = f"public, max-age={PUBLIC_CACHE_TTL}"


def public_cache_short(response: Response) -> None:
    response.headers["Cache-Control"] = f"public, max-age={PUBLIC_CACHE_TTL_SHORT}"
