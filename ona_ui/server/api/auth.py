"""
Authentication API Endpoints.

Passwordless sign-in with magic links, plus session lookup and sign-out.
The session token is set as an HTTP-only cookie and also returned once so
non-browser clients can send it as a bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Query, Request, Response

from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.users import MagicLinkRequest, SessionInfo, UserRead
from ona_ui.server.core.config import settings
from ona_ui.server.services.auth import AuthService
from ona_ui.server.services.deps import AuthContextDep, EmailServiceDep, SessionDep, get_session_token

router = APIRouter(tags=["auth"])

MAGIC_LINK_SENT_MESSAGE = "If an account exists for this email, a sign-in link has been sent"


@router.post(
    "/magic-link",
    response_model=ApiResponse[None],
    summary="Request Magic Link",
    description="Email a single-use sign-in link. The answer is the same whether or not the email is known.",
    response_description="Generic confirmation message.",
    responses={
        200: {"description": "Request accepted"},
        422: {"description": "Invalid email address"},
        502: {"description": "The email provider rejected the message"},
    },
)
async def request_magic_link(body: MagicLinkRequest, session: SessionDep, email_service: EmailServiceDep):
    """
    Request a magic link.

    - **email**: Address of an existing account.
    - **callback_url**: Optional frontend path to land on after sign-in.
    """
    await AuthService(session, email_service=email_service).request_magic_link(body.email, body.callback_url)
    return ok(message=MAGIC_LINK_SENT_MESSAGE)


@router.get(
    "/magic-link/verify",
    response_model=ApiResponse[SessionInfo],
    summary="Verify Magic Link",
    description="Consume a magic-link token, open a session and set the session cookie.",
    response_description="The signed-in user and the session token.",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid, used or expired token"},
    },
)
async def verify_magic_link(
    request: Request,
    response: Response,
    session: SessionDep,
    email_service: EmailServiceDep,
    token: str = Query(..., min_length=1, description="Token from the emailed link"),
):
    """
    Verify a magic link.

    - **token**: The single-use token carried by the link.
    """
    auth_config = settings.auth
    user, user_session = await AuthService(session, email_service=email_service).verify_magic_link(
        token,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    response.set_cookie(
        key=auth_config.session_cookie_name,
        value=user_session.token,
        max_age=auth_config.session_ttl_seconds,
        httponly=True,
        secure=auth_config.cookie_secure,
        samesite="lax",
    )
    return ok(
        SessionInfo(user=UserRead.model_validate(user), expires_at=user_session.expires_at, token=user_session.token),
        message="Signed in",
    )


@router.get(
    "/session",
    response_model=ApiResponse[Optional[SessionInfo]],
    summary="Get Current Session",
    description="Return the signed-in user, or null data for anonymous requests.",
    response_description="The current session or null.",
)
async def get_current_session(context: AuthContextDep):
    """
    Get the current session.

    The session is read from the session cookie or an ``Authorization: Bearer`` header.
    """
    if context is None:
        return ok(None)
    user, user_session = context
    return ok(SessionInfo(user=UserRead.model_validate(user), expires_at=user_session.expires_at))


@router.post(
    "/sign-out",
    response_model=ApiResponse[None],
    summary="Sign Out",
    description="Delete the current session and clear the session cookie.",
    response_description="Confirmation message.",
)
async def sign_out(request: Request, response: Response, session: SessionDep, email_service: EmailServiceDep):
    """
    Sign out.

    Signing out without a session is not an error.
    """
    await AuthService(session, email_service=email_service).sign_out(get_session_token(request))
    response.delete_cookie(settings.auth.session_cookie_name)
    return ok(message="Signed out")
