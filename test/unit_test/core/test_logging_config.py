"""Unit tests for logging configuration module.

Tests verify that setup_logging installs the expected handlers, formats and
per-module levels for the backend loggers.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from ona_ui.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler():
    return next(
        (
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ),
        None,
    )


def _file_handler():
    return next((h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)), None)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    setup_logging(enable_file=False)


class TestSetupLoggingLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert _console_handler().level == expected_level

    def test_root_logger_captures_everything(self):
        """Filtering happens at the handlers, the root logger stays at DEBUG."""
        setup_logging(log_level="WARNING", enable_file=False)

        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("something-else", DETAILED_FORMAT),
        ],
    )
    def test_format(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        formatter = _console_handler().formatter
        assert formatter._fmt == expected_format
        assert formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFiles:
    def test_file_handler_logs_debug(self, tmp_path: Path):
        with patch("ona_ui.core.logging_config.LOG_FILE_DIR", str(tmp_path)), patch(
            "ona_ui.core.logging_config.ENABLE_FILE_LOGGING", True
        ):
            setup_logging(log_level="ERROR", enable_file=True)

            handler = _file_handler()
            assert handler is not None
            assert handler.level == logging.DEBUG
            assert Path(handler.baseFilename) == tmp_path / "ona_ui.log"

    def test_file_logging_disabled_by_argument(self):
        setup_logging(enable_file=False)

        assert _file_handler() is None

    def test_file_logging_disabled_by_environment(self, tmp_path: Path):
        with patch("ona_ui.core.logging_config.LOG_FILE_DIR", str(tmp_path)), patch(
            "ona_ui.core.logging_config.ENABLE_FILE_LOGGING", False
        ):
            setup_logging(enable_file=True)

        assert _file_handler() is None


class TestHandlerManagement:
    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1


class TestModuleLevels:
    @pytest.mark.parametrize(
        "module_name,expected_level",
        [
            ("ona_ui.server.api", logging.DEBUG),
            ("ona_ui.server.services.payment_processing", logging.INFO),
            ("ona_ui.cli", logging.INFO),
            ("sqlalchemy.engine", logging.WARNING),
            ("stripe", logging.WARNING),
            ("botocore", logging.WARNING),
        ],
    )
    def test_module_level(self, module_name, expected_level):
        setup_logging(enable_file=False)

        assert logging.getLogger(module_name).level == expected_level

    def test_all_configured(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == getattr(logging, level)


def test_get_logger_returns_named_logger():
    logger = get_logger("ona_ui.server.services.licenses")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "ona_ui.server.services.licenses"
