"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables and that the
grouped configuration views are derived from them.
"""

import pytest

from ona_ui.server.core.config import DatabaseConfig, R2Config, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "DB_HOST",
        "DB_PORT",
        "DB_USER",
        "DB_PASSWORD",
        "DB_DATABASE",
        "STORAGE_PROVIDER",
        "STRIPE_SECRET_KEY",
        "NODE_ENV",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_server_port_binding(self, clean_env):
        clean_env.setenv("PORT", "4000")

        settings = Settings(_env_file=None)
        assert settings.server_port == 4000

    def test_environment_binding(self, clean_env):
        clean_env.setenv("NODE_ENV", "production")

        settings = Settings(_env_file=None)
        assert settings.environment == "production"

    def test_stripe_group(self, clean_env):
        clean_env.setenv("STRIPE_SECRET_KEY", "sk_test_123")
        clean_env.setenv("STRIPE_PRODUCT_ID_TEAM", "prod_team")

        stripe = Settings(_env_file=None).stripe
        assert stripe.secret_key == "sk_test_123"
        assert stripe.product_id_team == "prod_team"

    def test_storage_defaults(self, clean_env):
        storage = Settings(_env_file=None).storage

        assert storage.provider == "r2"
        assert storage.max_image_size == 5 * 1024 * 1024


class TestDatabaseConfig:
    def test_url_from_parts(self):
        config = DatabaseConfig(host="db", port=5433, user="ona", password="secret", database="catalog")

        assert config.url == "postgresql+asyncpg://ona:secret@db:5433/catalog"

    def test_database_url_overrides_parts(self):
        config = DatabaseConfig(database_url="sqlite+aiosqlite:///:memory:", host="ignored")

        assert config.url == "sqlite+aiosqlite:///:memory:"

    def test_settings_database_url(self, clean_env):
        clean_env.setenv("DB_HOST", "pg.internal")

        assert Settings(_env_file=None).database.url.startswith("postgresql+asyncpg://postgres:@pg.internal:5432/")


class TestR2Config:
    def test_endpoint_from_account_id(self):
        config = R2Config(account_id="abc123")

        assert config.resolved_endpoint == "https://abc123.r2.cloudflarestorage.com"

    def test_explicit_endpoint_wins(self):
        config = R2Config(account_id="abc123", endpoint="http://localhost:9000")

        assert config.resolved_endpoint == "http://localhost:9000"
