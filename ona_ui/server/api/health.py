"""
Health Check Endpoints.

This module provides basic system status endpoints (health, info)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ona_ui.core.database.base import utc_now
from ona_ui.core.logging_config import get_logger
from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.server.core import constant
from ona_ui.server.core.config import settings
from ona_ui.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=ApiResponse[dict],
    summary="Health Check",
    description="Check the operational status of the API server and its database connection.",
    response_description="Status object.",
)
async def health_check(session: SessionDep):
    """
    Health check endpoint.

    Returns ``ok`` when the server is reachable; ``database`` reports whether a
    trivial query succeeded.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Health check database ping failed: {e}")
        database = "disconnected"
    return ok(
        {
            "status": "ok",
            "database": database,
            "environment": settings.environment,
            "version": settings.version,
            "time": utc_now().isoformat(),
        }
    )


@router.get(
    "/info",
    response_model=ApiResponse[dict],
    summary="API Information",
    description="Retrieve the name, version and route groups of the API.",
    response_description="Information object.",
)
async def info():
    """
    Get API information.

    Returns the current version of the API and the prefixes of its route groups.
    """
    return ok(
        {
            "name": constant.PROJECT_NAME,
            "version": settings.version,
            "environment": settings.environment,
            "endpoints": {
                "auth": constant.API_AUTH_STR,
                "public": constant.API_PUBLIC_STR,
                "user": constant.API_USER_STR,
                "admin": constant.API_ADMIN_STR,
            },
        }
    )
