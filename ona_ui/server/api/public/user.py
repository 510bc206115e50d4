"""
User Account Endpoints.

Profile, dashboard, licenses, permissions and subscription of the signed-in
user. Every endpoint requires a session.
"""

from typing import List

from fastapi import APIRouter

from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.users import (
    LicenseRead,
    Permissions,
    ProfileUpdate,
    SubscriptionInfo,
    UserDashboard,
    UserRead,
    UserStats,
)
from ona_ui.server.services.deps import CurrentUserDep, SessionDep
from ona_ui.server.services.users import UserService

router = APIRouter(tags=["user"], responses={401: {"description": "Not signed in"}})


@router.get(
    "/profile",
    response_model=ApiResponse[UserRead],
    summary="Get Profile",
    description="Retrieve the profile of the signed-in user.",
    response_description="The user profile.",
)
async def get_profile(user: CurrentUserDep):
    return ok(UserRead.model_validate(user))


@router.put(
    "/profile",
    response_model=ApiResponse[UserRead],
    summary="Update Profile",
    description="Update profile fields and preferences of the signed-in user.",
    response_description="The updated profile.",
    responses={409: {"description": "Username already taken"}},
)
async def update_profile(body: ProfileUpdate, user: CurrentUserDep, session: SessionDep):
    """
    Update the profile.

    Only the fields present in the body are changed.

    - **username**: Lowercase letters, digits, ``_`` and ``-``; must be unique.
    - **preferred_framework** / **preferred_css**: Defaults for code previews.
    """
    updated = await UserService(session).update_profile(user.id, body.model_dump(exclude_unset=True))
    return ok(UserRead.model_validate(updated), message="Profile updated")


@router.get(
    "/dashboard",
    response_model=ApiResponse[UserDashboard],
    summary="Get Dashboard",
    description="Profile, subscription, permissions, licenses and statistics in one call.",
    response_description="The user dashboard.",
)
async def get_dashboard(user: CurrentUserDep, session: SessionDep):
    dashboard = await UserService(session).get_dashboard(user)
    return ok(
        UserDashboard(
            user=UserRead.model_validate(dashboard["user"]),
            subscription=SubscriptionInfo(**dashboard["subscription"]),
            permissions=Permissions(**dashboard["permissions"]),
            licenses=[LicenseRead.model_validate(license) for license in dashboard["licenses"]],
            stats=UserStats(**dashboard["stats"]),
        )
    )


@router.get(
    "/licenses",
    response_model=ApiResponse[List[LicenseRead]],
    summary="List Licenses",
    description="All licenses of the signed-in user, newest first.",
    response_description="A list of licenses.",
)
async def get_licenses(user: CurrentUserDep, session: SessionDep):
    licenses = await UserService(session).licenses.list_by_user(user.id)
    return ok([LicenseRead.model_validate(license) for license in licenses])


@router.get(
    "/permissions",
    response_model=ApiResponse[Permissions],
    summary="Get Permissions",
    description="What the signed-in user may access and manage.",
    response_description="The permission flags.",
)
async def get_permissions(user: CurrentUserDep, session: SessionDep):
    return ok(await UserService(session).get_permissions(user))


@router.get(
    "/subscription",
    response_model=ApiResponse[SubscriptionInfo],
    summary="Get Subscription",
    description="The highest active license of the signed-in user.",
    response_description="The subscription summary.",
)
async def get_subscription(user: CurrentUserDep, session: SessionDep):
    return ok(await UserService(session).get_subscription(user.id))


@router.get(
    "/stats",
    response_model=ApiResponse[UserStats],
    summary="Get User Statistics",
    description="License counts and total spent of the signed-in user.",
    response_description="The user statistics.",
)
async def get_stats(user: CurrentUserDep, session: SessionDep):
    return ok(await UserService(session).get_stats(user))
