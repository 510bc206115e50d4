"""
Unit tests for Logfire middleware.

This test suite covers:
- Request/response processing
- Error handling and exception tracking
- Slow request detection
- Header injection
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from ona_ui.server.middleware.logfire_middleware import LogfireMiddleware


def _mock_request(method: str = "GET", path: str = "/api/public/components"):
    request = AsyncMock(spec=Request)
    request.method = method
    request.url.path = path
    request.url.query = ""
    request.state = MagicMock()
    return request


class TestLogfireMiddlewareDispatch:
    """Test LogfireMiddleware.dispatch method."""

    @pytest.mark.asyncio
    async def test_middleware_processes_successful_request(self):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("ona_ui.server.middleware.logfire_middleware.log_api_request") as mock_log:
            response = await middleware.dispatch(_mock_request(), call_next)

            assert response.status_code == 200
            mock_log.assert_called_once()
            call_args = mock_log.call_args
            assert call_args[1]["method"] == "GET"
            assert call_args[1]["path"] == "/api/public/components"
            assert call_args[1]["status_code"] == 200
            assert call_args[1]["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_middleware_adds_process_time_header(self):
        async def call_next(request):
            return Response(content="created", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("ona_ui.server.middleware.logfire_middleware.log_api_request"):
            response = await middleware.dispatch(_mock_request("POST", "/api/admin/categories"), call_next)

        assert float(response.headers["X-Process-Time"]) >= 0

    @pytest.mark.asyncio
    async def test_middleware_logs_and_reraises_failures(self):
        async def call_next(request):
            raise RuntimeError("database down")

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("ona_ui.server.middleware.logfire_middleware.log_api_request") as mock_log,
            patch("ona_ui.server.middleware.logfire_middleware.logger") as mock_logger,
        ):
            with pytest.raises(RuntimeError, match="database down"):
                await middleware.dispatch(_mock_request(), call_next)

            assert mock_log.call_args[1]["status_code"] == 500
            mock_logger.error.assert_called_once()
            assert mock_logger.error.call_args[1]["extra"]["error"] == "database down"

    @pytest.mark.asyncio
    async def test_middleware_warns_on_slow_request(self):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("ona_ui.server.middleware.logfire_middleware.log_api_request"),
            patch("ona_ui.server.middleware.logfire_middleware.logger") as mock_logger,
            patch("ona_ui.server.middleware.logfire_middleware.time.perf_counter", side_effect=[0.0, 2.5]),
        ):
            await middleware.dispatch(_mock_request(), call_next)

            mock_logger.warning.assert_called_once()
            assert mock_logger.warning.call_args[1]["extra"]["duration_ms"] == pytest.approx(2500.0)

    @pytest.mark.asyncio
    async def test_middleware_fast_request_does_not_warn(self):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("ona_ui.server.middleware.logfire_middleware.log_api_request"),
            patch("ona_ui.server.middleware.logfire_middleware.logger") as mock_logger,
            patch("ona_ui.server.middleware.logfire_middleware.time.perf_counter", side_effect=[0.0, 0.01]),
        ):
            await middleware.dispatch(_mock_request(), call_next)

            mock_logger.warning.assert_not_called()
