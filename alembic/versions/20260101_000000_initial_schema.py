"""Initial schema: catalog, components, users, sessions, licenses and assets

Revision ID: 20260101_000000
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260101_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create every table of the Ona UI backend."""
    # Catalog
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_products_slug", "slug", unique=True),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("product_id", sa.String(36), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon_name", sa.String(100), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "slug", name="uq_categories_product_slug"),
        sa.Index("ix_categories_product_id", "product_id"),
        sa.Index("ix_categories_slug", "slug"),
    )

    op.create_table(
        "subcategories",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_id", "slug", name="uq_subcategories_category_slug"),
        sa.Index("ix_subcategories_category_id", "category_id"),
        sa.Index("ix_subcategories_slug", "slug"),
    )

    # Components
    op.create_table(
        "components",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("subcategory_id", sa.String(36), sa.ForeignKey("subcategories.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("required_tier", sa.String(32), nullable=False, server_default="pro"),
        sa.Column("access_type", sa.String(32), nullable=False, server_default="preview_only"),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("is_new", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("conversion_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("tested_companies", sa.JSON(), nullable=False),
        sa.Column("preview_image_large", sa.Text(), nullable=True),
        sa.Column("preview_image_small", sa.Text(), nullable=True),
        sa.Column("preview_video_url", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("copy_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subcategory_id", "slug", name="uq_components_subcategory_slug"),
        sa.Index("ix_components_subcategory_id", "subcategory_id"),
        sa.Index("ix_components_slug", "slug"),
    )

    op.create_table(
        "component_versions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("component_id", sa.String(36), sa.ForeignKey("components.id"), nullable=False),
        sa.Column("version_number", sa.String(20), nullable=False),
        sa.Column("framework", sa.String(32), nullable=False),
        sa.Column("css_framework", sa.String(32), nullable=False),
        sa.Column("code_preview", sa.Text(), nullable=True),
        sa.Column("code_full", sa.Text(), nullable=True),
        sa.Column("code_encrypted", sa.Text(), nullable=True),
        sa.Column("dependencies", sa.JSON(), nullable=True),
        sa.Column("config_required", sa.JSON(), nullable=True),
        sa.Column("supports_dark_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("dark_mode_code", sa.Text(), nullable=True),
        sa.Column("integrations", sa.JSON(), nullable=True),
        sa.Column("integration_code", sa.JSON(), nullable=True),
        sa.Column("files", sa.JSON(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "component_id",
            "framework",
            "css_framework",
            "version_number",
            name="uq_component_versions_variant",
        ),
        sa.Index("ix_component_versions_component_id", "component_id"),
    )

    # Users and authentication
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("username", sa.String(50), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="user"),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_verified_at", sa.DateTime(), nullable=True),
        sa.Column("provider", sa.String(32), nullable=False, server_default="email"),
        sa.Column("provider_id", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("preferred_framework", sa.String(32), nullable=False, server_default="react"),
        sa.Column("preferred_css", sa.String(32), nullable=False, server_default="tailwind_v4"),
        sa.Column("dark_mode_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.Index("ix_users_email", "email", unique=True),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("account_id", sa.String(255), nullable=False),
        sa.Column("provider_id", sa.String(50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_accounts_user_id", "user_id"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("token", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_sessions_token", "token", unique=True),
        sa.Index("ix_sessions_user_id", "user_id"),
    )

    op.create_table(
        "verifications",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("identifier", sa.String(255), nullable=False),
        sa.Column("value", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_verifications_identifier", "identifier"),
        sa.Index("ix_verifications_value", "value", unique=True),
    )

    # Licenses
    op.create_table(
        "licenses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("license_key", sa.String(32), nullable=False),
        sa.Column("tier", sa.String(32), nullable=False),
        sa.Column("stripe_payment_id", sa.String(255), nullable=True),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_invoice_id", sa.String(255), nullable=True),
        sa.Column("amount_paid", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("payment_status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("seats_allowed", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("seats_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_until", sa.DateTime(), nullable=True),
        sa.Column("is_lifetime", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_early_bird", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discount_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("discount_code", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_payment_id", name="uq_licenses_stripe_payment_id"),
        sa.Index("ix_licenses_license_key", "license_key", unique=True),
        sa.Index("ix_licenses_user_id", "user_id"),
    )

    # Uploaded files
    op.create_table(
        "assets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("disk", sa.String(32), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("hash", sa.String(64), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(512), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "component_version_id", sa.String(36), sa.ForeignKey("component_versions.id"), nullable=True
        ),
        sa.Column("uploaded_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_assets_path", "path"),
        sa.Index("ix_assets_hash", "hash"),
        sa.Index("ix_assets_component_version_id", "component_version_id"),
    )


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table("assets")
    op.drop_table("licenses")
    op.drop_table("verifications")
    op.drop_table("sessions")
    op.drop_table("accounts")
    op.drop_table("users")
    op.drop_table("component_versions")
    op.drop_table("components")
    op.drop_table("subcategories")
    op.drop_table("categories")
    op.drop_table("products")
