"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Environment variable parsing
- Logfire initialization and instrumentation flags
- Graceful degradation when Logfire is disabled or fails
- Business event helpers
"""

import importlib
import os
from unittest.mock import patch

import pytest
from fastapi import FastAPI

import ona_ui.core.monitoring as monitoring
from ona_ui.core.monitoring import (
    initialize_logfire,
    log_api_request,
    log_batch_upload,
    log_error,
    log_payment_event,
)


class TestEnvironmentConfiguration:
    @pytest.fixture(autouse=True)
    def restore_module(self):
        yield
        importlib.reload(monitoring)

    def test_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_ENABLED is False
            assert monitoring.LOGFIRE_SERVICE_NAME == "ona-ui-backend"
            assert monitoring.LOGFIRE_TRACE_SQLALCHEMY is True
            assert monitoring.LOGFIRE_TRACE_HTTPX is True
            assert monitoring.LOGFIRE_TRACE_FASTAPI is True

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_enabled_values(self, value):
        with patch.dict(os.environ, {"LOGFIRE_ENABLED": value}):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_ENABLED is True

    def test_values_from_environment(self):
        env = {
            "LOGFIRE_TOKEN": "token-123",
            "LOGFIRE_ENVIRONMENT": "production",
            "LOGFIRE_SERVICE_VERSION": "2.0.0",
            "LOGFIRE_TRACE_SQLALCHEMY": "0",
            "LOGFIRE_TRACE_HTTPX": "no",
        }
        with patch.dict(os.environ, env):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_TOKEN == "token-123"
            assert monitoring.LOGFIRE_ENVIRONMENT == "production"
            assert monitoring.LOGFIRE_SERVICE_VERSION == "2.0.0"
            assert monitoring.LOGFIRE_TRACE_SQLALCHEMY is False
            assert monitoring.LOGFIRE_TRACE_HTTPX is False


class TestInitializeLogfire:
    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", False)
    @patch("ona_ui.core.monitoring.logger")
    def test_disabled(self, mock_logger):
        assert initialize_logfire() is False

        mock_logger.info.assert_called_once()
        assert "disabled" in mock_logger.info.call_args[0][0].lower()

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TOKEN", "")
    @patch("ona_ui.core.monitoring.logger")
    def test_missing_token(self, mock_logger):
        assert initialize_logfire() is False

        mock_logger.warning.assert_called_once()
        assert "token" in mock_logger.warning.call_args[0][0].lower()

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("ona_ui.core.monitoring.LOGFIRE_SERVICE_NAME", "test-service")
    @patch("ona_ui.core.monitoring.LOGFIRE_SERVICE_VERSION", "1.0.0")
    @patch("ona_ui.core.monitoring.LOGFIRE_ENVIRONMENT", "test")
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_configures_and_instruments(self):
        app = FastAPI()
        with patch("logfire.configure") as configure, patch("logfire.instrument_sqlalchemy") as sqlalchemy, patch(
            "logfire.instrument_httpx"
        ) as httpx, patch("logfire.instrument_fastapi") as fastapi:
            assert initialize_logfire(app) is True

        configure.assert_called_once_with(
            token="test-token", service_name="test-service", service_version="1.0.0", environment="test"
        )
        sqlalchemy.assert_called_once()
        httpx.assert_called_once()
        fastapi.assert_called_once_with(app=app)

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", False)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_HTTPX", False)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_skips_fastapi_without_app(self):
        with patch("logfire.configure"), patch("logfire.instrument_fastapi") as fastapi:
            assert initialize_logfire(None) is True

        fastapi.assert_not_called()

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("ona_ui.core.monitoring.logger")
    def test_configure_failure(self, mock_logger):
        with patch("logfire.configure", side_effect=RuntimeError("bad token")):
            assert initialize_logfire() is False

        mock_logger.error.assert_called_once()

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_HTTPX", False)
    @patch("ona_ui.core.monitoring.LOGFIRE_TRACE_FASTAPI", False)
    @patch("ona_ui.core.monitoring.logger")
    def test_instrumentation_failure_is_a_warning(self, mock_logger):
        with patch("logfire.configure"), patch("logfire.instrument_sqlalchemy", side_effect=RuntimeError("boom")):
            assert initialize_logfire() is True

        mock_logger.warning.assert_called_once()
        assert "SQLAlchemy" in mock_logger.warning.call_args[0][0]


class TestEventHelpers:
    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", False)
    @patch("ona_ui.core.monitoring.logger")
    def test_disabled_helpers_only_debug_log(self, mock_logger):
        log_api_request("GET", "/api/health", 200, 1.5)
        log_payment_event("checkout.session.completed", "evt_1", True)
        log_batch_upload(uploaded=2, skipped=1, errors=0, duration_ms=12.0, total_size=2048)
        log_error("StripeError", "card declined")

        assert mock_logger.debug.call_count == 4

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    def test_enabled_helpers_send_attributes(self):
        with patch("logfire.info") as info:
            log_payment_event("charge.refunded", "evt_2", False, detail="no license")
            log_error("ValueError", "bad input", {"path": "/api/admin"})

        assert info.call_args_list[0].args == ("Stripe event processed",)
        assert info.call_args_list[0].kwargs == {
            "event_type": "charge.refunded",
            "event_id": "evt_2",
            "processed": False,
            "detail": "no license",
        }
        assert info.call_args_list[1].kwargs["path"] == "/api/admin"

    @patch("ona_ui.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("ona_ui.core.monitoring.logger")
    def test_enabled_helper_failure_is_swallowed(self, mock_logger):
        with patch("logfire.info", side_effect=RuntimeError("exporter down")):
            log_api_request("POST", "/api/webhooks/stripe", 200, 3.0)

        mock_logger.debug.assert_called_once()
