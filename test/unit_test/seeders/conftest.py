import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool


@pytest_asyncio.fixture
async def seed_engine():
    """Fresh in-memory database with every table created."""
    from ona_ui.core.database import create_all

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def seed_session_maker(seed_engine):
    return async_sessionmaker(seed_engine, class_=AsyncSession, expire_on_commit=False)
