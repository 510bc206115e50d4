"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DatabaseConfig(BaseModel):
    """PostgreSQL database configuration."""

    database_url: Optional[str] = Field(
        default=None, alias="DATABASE_URL", description="Full database URL, overrides the DB_* parts when set"
    )
    host: str = Field(default="localhost", alias="DB_HOST", description="PostgreSQL database host address")
    port: int = Field(default=5432, alias="DB_PORT", description="PostgreSQL database port number")
    user: str = Field(default="postgres", alias="DB_USER", description="PostgreSQL database user")
    password: str = Field(default="", alias="DB_PASSWORD", description="PostgreSQL database password")
    database: str = Field(default="ona_ui", alias="DB_DATABASE", description="PostgreSQL database name")

    model_config = {"populate_by_name": True}

    @property
    def url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


class StorageConfig(BaseModel):
    """Object storage selection and upload limits."""

    provider: str = Field(
        default="r2", alias="STORAGE_PROVIDER", description="Storage strategy for uploads (r2, s3, fs or dual)"
    )
    default_disk: str = Field(
        default="fs", alias="DRIVE_DISK", description="Default disk (fs, public, s3, s3_private, r2, r2_private)"
    )
    local_root: str = Field(default="storage", alias="STORAGE_LOCAL_ROOT", description="Root folder of local disks")
    public_url_prefix: str = Field(
        default="/uploads", alias="STORAGE_PUBLIC_URL_PREFIX", description="URL prefix of the public local disk"
    )
    max_file_size: int = Field(
        default=10 * 1024 * 1024, alias="MAX_FILE_SIZE", description="Maximum generic upload size in bytes"
    )
    max_image_size: int = Field(
        default=5 * 1024 * 1024, alias="MAX_IMAGE_SIZE", description="Maximum image upload size in bytes"
    )

    model_config = {"populate_by_name": True}


class S3Config(BaseModel):
    """AWS S3 configuration."""

    access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID", description="AWS access key id")
    secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY", description="AWS secret access key"
    )
    region: str = Field(default="eu-west-3", alias="AWS_REGION", description="AWS region of the buckets")
    bucket: Optional[str] = Field(default=None, alias="AWS_BUCKET", description="Public assets bucket")
    private_bucket: Optional[str] = Field(default=None, alias="AWS_PRIVATE_BUCKET", description="Private bucket")
    endpoint: Optional[str] = Field(default=None, alias="AWS_ENDPOINT", description="Custom S3 endpoint (optional)")
    cdn_url: Optional[str] = Field(default=None, alias="AWS_CDN_URL", description="CDN base URL for public objects")

    model_config = {"populate_by_name": True}


class R2Config(BaseModel):
    """Cloudflare R2 configuration."""

    account_id: Optional[str] = Field(default=None, alias="R2_ACCOUNT_ID", description="Cloudflare account id")
    access_key_id: Optional[str] = Field(default=None, alias="R2_ACCESS_KEY_ID", description="R2 access key id")
    secret_access_key: Optional[str] = Field(
        default=None, alias="R2_SECRET_ACCESS_KEY", description="R2 secret access key"
    )
    bucket: Optional[str] = Field(default=None, alias="R2_BUCKET", description="Public assets bucket")
    private_bucket: Optional[str] = Field(default=None, alias="R2_PRIVATE_BUCKET", description="Private bucket")
    endpoint: Optional[str] = Field(default=None, alias="R2_ENDPOINT", description="R2 S3-compatible endpoint")
    cdn_url: Optional[str] = Field(default=None, alias="R2_CDN_URL", description="CDN base URL for public objects")

    model_config = {"populate_by_name": True}

    @property
    def resolved_endpoint(self) -> Optional[str]:
        if self.endpoint:
            return self.endpoint
        if self.account_id:
            return f"https://{self.account_id}.r2.cloudflarestorage.com"
        return None


class StripeConfig(BaseModel):
    """Stripe API configuration."""

    secret_key: Optional[str] = Field(default=None, alias="STRIPE_SECRET_KEY", description="Stripe secret API key")
    publishable_key: Optional[str] = Field(
        default=None, alias="STRIPE_PUBLISHABLE_KEY", description="Stripe publishable key exposed to the frontend"
    )
    webhook_secret: Optional[str] = Field(
        default=None, alias="STRIPE_WEBHOOK_SECRET", description="Signing secret of the webhook endpoint"
    )
    product_id_pro: str = Field(default="prod_example_pro", alias="STRIPE_PRODUCT_ID_PRO")
    product_id_team: str = Field(default="prod_example_team", alias="STRIPE_PRODUCT_ID_TEAM")
    product_id_enterprise: str = Field(default="prod_example_enterprise", alias="STRIPE_PRODUCT_ID_ENTERPRISE")

    model_config = {"populate_by_name": True}


class EmailConfig(BaseModel):
    """Resend email configuration."""

    resend_api_key: Optional[str] = Field(default=None, alias="RESEND_API_KEY", description="Resend API key")
    sender: str = Field(
        default="Ona UI <noreply@notifications.ona-ui.com>", alias="EMAIL_FROM", description="Default sender"
    )
    api_url: str = Field(default="https://api.resend.com", alias="RESEND_API_URL", description="Resend API base URL")

    model_config = {"populate_by_name": True}


class AuthConfig(BaseModel):
    """Session and magic-link authentication configuration."""

    frontend_url: str = Field(
        default="http://localhost:3000", alias="FRONTEND_URL", description="Public site URL used in magic links"
    )
    auth_url: str = Field(
        default="http://localhost:3000", alias="BETTER_AUTH_URL", description="Base URL for checkout redirects"
    )
    cookie_prefix: str = Field(default="ona-ui", alias="AUTH_COOKIE_PREFIX", description="Session cookie prefix")
    session_ttl_seconds: int = Field(
        default=7 * 24 * 3600, alias="AUTH_SESSION_TTL", description="Session lifetime in seconds"
    )
    magic_link_ttl_seconds: int = Field(
        default=300, alias="AUTH_MAGIC_LINK_TTL", description="Magic-link token lifetime in seconds"
    )
    cookie_secure: bool = Field(default=False, alias="AUTH_COOKIE_SECURE", description="Send cookie over HTTPS only")

    model_config = {"populate_by_name": True}

    @property
    def session_cookie_name(self) -> str:
        return f"{self.cookie_prefix}.session_token"


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Ona UI Server Configuration
    # =====================================================================
    server_host: str = Field(default="0.0.0.0", alias="HOST", description="Server host address to bind to")
    server_port: int = Field(default=3333, alias="PORT", description="Server port number")
    log_level: str = Field(
        default="INFO", alias="LOG_LEVEL", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    app_key: Optional[str] = Field(default=None, alias="APP_KEY", description="Application secret key")
    environment: str = Field(default="development", alias="NODE_ENV", description="Deployment environment name")
    app_url: str = Field(default="http://localhost:3333", alias="APP_URL", description="Public URL of this API")
    version: str = Field(default="1.0.0", alias="APP_VERSION", description="Reported API version")

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_database: str = Field(default="ona_ui", alias="DB_DATABASE")

    # =====================================================================
    # Storage Configuration
    # =====================================================================
    storage_provider: str = Field(default="r2", alias="STORAGE_PROVIDER")
    drive_disk: str = Field(default="fs", alias="DRIVE_DISK")
    storage_local_root: str = Field(default="storage", alias="STORAGE_LOCAL_ROOT")
    storage_public_url_prefix: str = Field(default="/uploads", alias="STORAGE_PUBLIC_URL_PREFIX")
    max_file_size: int = Field(default=10 * 1024 * 1024, alias="MAX_FILE_SIZE")
    max_image_size: int = Field(default=5 * 1024 * 1024, alias="MAX_IMAGE_SIZE")

    aws_access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    aws_region: str = Field(default="eu-west-3", alias="AWS_REGION")
    aws_bucket: Optional[str] = Field(default=None, alias="AWS_BUCKET")
    aws_private_bucket: Optional[str] = Field(default=None, alias="AWS_PRIVATE_BUCKET")
    aws_endpoint: Optional[str] = Field(default=None, alias="AWS_ENDPOINT")
    aws_cdn_url: Optional[str] = Field(default=None, alias="AWS_CDN_URL")

    r2_account_id: Optional[str] = Field(default=None, alias="R2_ACCOUNT_ID")
    r2_access_key_id: Optional[str] = Field(default=None, alias="R2_ACCESS_KEY_ID")
    r2_secret_access_key: Optional[str] = Field(default=None, alias="R2_SECRET_ACCESS_KEY")
    r2_bucket: Optional[str] = Field(default=None, alias="R2_BUCKET")
    r2_private_bucket: Optional[str] = Field(default=None, alias="R2_PRIVATE_BUCKET")
    r2_endpoint: Optional[str] = Field(default=None, alias="R2_ENDPOINT")
    r2_cdn_url: Optional[str] = Field(default=None, alias="R2_CDN_URL")

    # =====================================================================
    # Third-party Services
    # =====================================================================
    stripe_secret_key: Optional[str] = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: Optional[str] = Field(default=None, alias="STRIPE_PUBLISHABLE_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_product_id_pro: str = Field(default="prod_example_pro", alias="STRIPE_PRODUCT_ID_PRO")
    stripe_product_id_team: str = Field(default="prod_example_team", alias="STRIPE_PRODUCT_ID_TEAM")
    stripe_product_id_enterprise: str = Field(
        default="prod_example_enterprise", alias="STRIPE_PRODUCT_ID_ENTERPRISE"
    )

    resend_api_key: Optional[str] = Field(default=None, alias="RESEND_API_KEY")
    email_from: str = Field(default="Ona UI <noreply@notifications.ona-ui.com>", alias="EMAIL_FROM")
    resend_api_url: str = Field(default="https://api.resend.com", alias="RESEND_API_URL")

    # =====================================================================
    # Authentication
    # =====================================================================
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")
    better_auth_url: str = Field(default="http://localhost:3000", alias="BETTER_AUTH_URL")
    auth_cookie_prefix: str = Field(default="ona-ui", alias="AUTH_COOKIE_PREFIX")
    auth_session_ttl: int = Field(default=7 * 24 * 3600, alias="AUTH_SESSION_TTL")
    auth_magic_link_ttl: int = Field(default=300, alias="AUTH_MAGIC_LINK_TTL")
    auth_cookie_secure: bool = Field(default=False, alias="AUTH_COOKIE_SECURE")

    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def storage(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def s3(self) -> S3Config:
        """Get AWS S3 configuration from environment variables."""
        return S3Config.model_validate(self.model_dump(by_alias=True))

    @property
    def r2(self) -> R2Config:
        """Get Cloudflare R2 configuration from environment variables."""
        return R2Config.model_validate(self.model_dump(by_alias=True))

    @property
    def stripe(self) -> StripeConfig:
        """Get Stripe configuration from environment variables."""
        return StripeConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def email(self) -> EmailConfig:
        """Get Resend email configuration from environment variables."""
        return EmailConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def auth(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        return AuthConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
