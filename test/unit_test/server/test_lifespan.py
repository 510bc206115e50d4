"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database and that a failing
database does not prevent the application from starting.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

pytestmark = pytest.mark.asyncio


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_lifespan_startup_initializes_database(self):
        from ona_ui.server.main import lifespan

        with patch("ona_ui.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()

    async def test_lifespan_survives_database_failure(self):
        from ona_ui.server.main import lifespan

        with (
            patch("ona_ui.server.main.init_db", new_callable=AsyncMock, side_effect=ConnectionError("refused")),
            patch("ona_ui.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

            mock_logger.error.assert_called_once()
            assert "Database initialization failed" in mock_logger.error.call_args[0][0]

    async def test_lifespan_logs_shutdown(self):
        from ona_ui.server.main import lifespan

        with (
            patch("ona_ui.server.main.init_db", new_callable=AsyncMock),
            patch("ona_ui.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

            messages = [call[0][0] for call in mock_logger.info.call_args_list]
            assert "Shutting down Ona UI API..." in messages
