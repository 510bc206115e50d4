"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ona_ui.core.database import init_db
from ona_ui.core.logging_config import get_logger, setup_logging
from ona_ui.core.monitoring import initialize_logfire

from .api import auth, health
from .api.admin import categories as admin_categories
from .api.admin import component_versions as admin_component_versions
from .api.admin import components as admin_components
from .api.admin import files as admin_files
from .api.admin import subcategories as admin_subcategories
from .api.public import categories, components, payment, user, webhooks
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. A failing database does not prevent
    the server from starting; the health endpoint reports it instead.
    """
    try:
        logger.info("Starting up Ona UI API...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Ona UI API...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Ona UI API

    Backend of the Ona UI component marketplace. It serves the public catalog
    and checkout to the documentation site, and catalog, version and asset
    management to the admin dashboard.
    """,
    version=settings.version,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

app.add_middleware(LogfireMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, prefix=constant.API_PREFIX, tags=["health"])
app.include_router(auth.router, prefix=constant.API_AUTH_STR)

# Public
app.include_router(categories.router, prefix=f"{constant.API_PUBLIC_STR}/categories")
app.include_router(components.router, prefix=f"{constant.API_PUBLIC_STR}/components")
app.include_router(payment.router, prefix=f"{constant.API_PUBLIC_STR}/payment")
app.include_router(webhooks.router, prefix=f"{constant.API_PUBLIC_STR}/webhooks")
app.include_router(user.router, prefix=constant.API_USER_STR)

# Admin
app.include_router(admin_categories.router, prefix=f"{constant.API_ADMIN_STR}/categories")
app.include_router(admin_subcategories.router, prefix=f"{constant.API_ADMIN_STR}/subcategories")
app.include_router(admin_components.router, prefix=f"{constant.API_ADMIN_STR}/components")
app.include_router(admin_component_versions.router, prefix=f"{constant.API_ADMIN_STR}/components/{{component_id}}")
app.include_router(admin_files.router, prefix=f"{constant.API_ADMIN_STR}/files")
