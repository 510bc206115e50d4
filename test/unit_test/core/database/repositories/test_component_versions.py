"""Unit tests for the component version repository.

The default-version writes are checked with a mocked session (one commit,
rollback on failure); the invariant itself is checked against SQLite with a
random sequence of operations.
"""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from ona_ui.core.database import create_all
from ona_ui.core.database.entities import (
    Category,
    Component,
    ComponentVersion,
    CssFramework,
    FrameworkType,
    Product,
    Subcategory,
)
from ona_ui.core.database.repositories.components import ComponentVersionRepository

pytestmark = pytest.mark.asyncio


class TestComponentVersionRepositoryMocked:
    """Transaction handling with a mocked session."""

    @pytest.fixture
    def mock_session(self):
        session = AsyncMock()
        session.add = MagicMock()
        session.commit = AsyncMock()
        session.rollback = AsyncMock()
        session.refresh = AsyncMock()
        session.execute = AsyncMock()
        return session

    @pytest.fixture
    def repository(self, mock_session):
        return ComponentVersionRepository(mock_session)

    @staticmethod
    def _version(**fields) -> ComponentVersion:
        return ComponentVersion(
            component_id="component_1",
            version_number="1.0.0",
            framework=FrameworkType.REACT,
            css_framework=CssFramework.TAILWIND_V4,
            **fields,
        )

    @patch.object(ComponentVersionRepository, "count_for_component", new_callable=AsyncMock)
    async def test_first_version_becomes_default(self, mock_count, repository, mock_session):
        mock_count.return_value = 0
        version = self._version()

        result = await repository.create(version)

        assert result.is_default is True
        # one UPDATE clearing the previous defaults, then a single commit
        mock_session.execute.assert_awaited_once()
        mock_session.commit.assert_awaited_once()
        mock_session.refresh.assert_awaited_once_with(version)

    @patch.object(ComponentVersionRepository, "count_for_component", new_callable=AsyncMock)
    async def test_non_default_version_does_not_touch_others(self, mock_count, repository, mock_session):
        mock_count.return_value = 2

        result = await repository.create(self._version())

        assert result.is_default is False
        mock_session.execute.assert_not_awaited()
        mock_session.commit.assert_awaited_once()

    @patch.object(ComponentVersionRepository, "count_for_component", new_callable=AsyncMock)
    async def test_failed_commit_rolls_back(self, mock_count, repository, mock_session):
        mock_count.return_value = 1
        mock_session.commit.side_effect = RuntimeError("unique violation")

        with pytest.raises(RuntimeError):
            await repository.create(self._version(is_default=True))

        mock_session.rollback.assert_awaited_once()
        mock_session.refresh.assert_not_awaited()

    async def test_set_default_commits_once(self, repository, mock_session):
        version = self._version(is_default=False)

        result = await repository.set_default(version)

        assert result.is_default is True
        mock_session.execute.assert_awaited_once()
        mock_session.add.assert_called_once_with(version)
        mock_session.commit.assert_awaited_once()

    async def test_set_default_failure_rolls_back(self, repository, mock_session):
        mock_session.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            await repository.set_default(self._version())

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()


@pytest_asyncio.fixture
async def sqlite_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    await create_all(engine)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
    await engine.dispose()


async def _component(session: AsyncSession) -> Component:
    product = Product(name="Ona UI", slug="ona-ui")
    session.add(product)
    await session.flush()
    category = Category(product_id=product.id, name="Marketing", slug="marketing")
    session.add(category)
    await session.flush()
    subcategory = Subcategory(category_id=category.id, name="Heroes", slug="heroes")
    session.add(subcategory)
    await session.flush()
    component = Component(subcategory_id=subcategory.id, name="Hero", slug="hero")
    session.add(component)
    await session.commit()
    return component


async def test_single_default_after_random_operations(sqlite_session):
    repository = ComponentVersionRepository(sqlite_session)
    component = await _component(sqlite_session)
    rng = random.Random(7)
    variants = [(framework, css) for framework in FrameworkType for css in CssFramework]
    rng.shuffle(variants)

    versions = []
    for step in range(40):
        operation = rng.choice(("create", "set_default", "update", "delete")) if versions else "create"
        if operation == "create" and variants:
            framework, css = variants.pop()
            versions.append(
                await repository.create(
                    ComponentVersion(
                        component_id=component.id,
                        version_number="1.0.0",
                        framework=framework,
                        css_framework=css,
                        is_default=rng.random() < 0.5,
                    )
                )
            )
        elif operation == "set_default":
            await repository.set_default(rng.choice(versions))
        elif operation == "update":
            version = rng.choice(versions)
            version.is_default = True
            await repository.update(version)
        elif operation == "delete" and len(versions) > 1:
            victim = versions.pop(rng.randrange(len(versions)))
            await repository.delete_version(victim)

        assert await repository.count_defaults(component.id) == 1, f"step {step}: {operation}"
