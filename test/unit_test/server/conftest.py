import os
from datetime import timedelta
from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from test.settings import test_settings

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test environment before importing the app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["STORAGE_PROVIDER"] = "fs"
os.environ["DRIVE_DISK"] = "fs"

ADMIN_TOKEN = "admin-session-token"
USER_TOKEN = "user-session-token"
WEBHOOK_SECRET = test_settings.stripe.webhook_secret


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    from ona_ui.core.database import create_all

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with maker() as session:
        yield session


@pytest_asyncio.fixture
async def storage(tmp_path):
    from ona_ui.server.core.config import StorageConfig
    from ona_ui.server.services.storage import StorageManager

    config = StorageConfig(provider="fs", default_disk="fs", local_root=str(tmp_path), public_url_prefix="/uploads")
    return StorageManager(storage=config)


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, storage) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from ona_ui.core.database import get_session
    from ona_ui.server.core.config import EmailConfig, StripeConfig
    from ona_ui.server.main import app
    from ona_ui.server.services.email import EmailService, get_email_service
    from ona_ui.server.services.storage import get_storage
    from ona_ui.server.services.stripe_client import StripeService, get_stripe_service

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_email_service] = lambda: EmailService(EmailConfig(resend_api_key=None))
    app.dependency_overrides[get_stripe_service] = lambda: StripeService(
        StripeConfig(secret_key=test_settings.stripe.secret_key, webhook_secret=WEBHOOK_SECRET)
    )

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("ona_ui.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client

    app.dependency_overrides.clear()


async def _user_with_session(session: AsyncSession, email: str, role, token: str):
    from ona_ui.core.database.base import utc_now
    from ona_ui.core.database.entities import User, UserSession

    user = User(email=email, name=email.split("@")[0], role=role, email_verified=True)
    session.add(user)
    await session.flush()
    session.add(UserSession(token=token, expires_at=utc_now() + timedelta(days=1), user_id=user.id))
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(session: AsyncSession):
    from ona_ui.core.database.entities import UserRole

    return await _user_with_session(session, "admin@ona-ui.com", UserRole.ADMIN, ADMIN_TOKEN)


@pytest_asyncio.fixture
async def regular_user(session: AsyncSession):
    from ona_ui.core.database.entities import UserRole

    return await _user_with_session(session, "member@ona-ui.com", UserRole.USER, USER_TOKEN)


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers(regular_user):
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest_asyncio.fixture
async def catalog(session: AsyncSession):
    """One product with a category and a subcategory."""
    from ona_ui.core.database.entities import Category, Product, Subcategory

    product = Product(name="Ona UI", slug="ona-ui")
    session.add(product)
    await session.flush()
    category = Category(product_id=product.id, name="Marketing", slug="marketing", sort_order=1)
    session.add(category)
    await session.flush()
    subcategory = Subcategory(category_id=category.id, name="Heroes", slug="heroes", sort_order=1)
    session.add(subcategory)
    await session.commit()
    return {"product": product, "category": category, "subcategory": subcategory}
