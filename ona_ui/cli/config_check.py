"""
Configuration validation.

Checks the environment variables the payment and authentication flows rely
on, then optionally pings the database, Stripe, Resend and the storage disks.
"""

import os
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

import httpx
from sqlalchemy import text

from ona_ui.core.database import engine
from ona_ui.core.errors import ServiceError
from ona_ui.core.logging_config import get_logger
from ona_ui.server.services.email import EmailService
from ona_ui.server.services.storage import S3Disk, StorageError, StorageManager
from ona_ui.server.services.stripe_client import StripeService

logger = get_logger(__name__)

SENSITIVE_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _is_port(value: str) -> bool:
    return value.isdigit() and int(value) > 0


def _is_url(value: str) -> bool:
    return value.startswith("http")


@dataclass(frozen=True)
class EnvCheck:
    name: str
    required: bool
    description: str
    validator: Optional[Callable[[str], bool]] = None
    example: Optional[str] = None


@dataclass
class CheckResult:
    name: str
    status: str  # ok, missing, invalid, failed, skipped
    message: str = ""
    value: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status in ("ok", "skipped")


ENV_CHECKS: List[EnvCheck] = [
    EnvCheck("DB_HOST", True, "PostgreSQL database host", example="localhost"),
    EnvCheck("DB_PORT", True, "PostgreSQL database port", _is_port, "5432"),
    EnvCheck("DB_USER", True, "Database user", example="postgres"),
    EnvCheck("DB_PASSWORD", True, "Database password", example="password"),
    EnvCheck("DB_DATABASE", True, "Database name", example="ona_ui"),
    EnvCheck("STRIPE_SECRET_KEY", True, "Stripe secret key", lambda v: v.startswith("sk_"), "sk_test_..."),
    EnvCheck("STRIPE_PUBLISHABLE_KEY", True, "Stripe publishable key", lambda v: v.startswith("pk_"), "pk_test_..."),
    EnvCheck("STRIPE_WEBHOOK_SECRET", True, "Stripe webhook signing secret", lambda v: v.startswith("whsec_"), "whsec_..."),
    EnvCheck("RESEND_API_KEY", True, "Resend API key", lambda v: v.startswith("re_"), "re_..."),
    EnvCheck("BETTER_AUTH_URL", True, "Base URL for checkout redirects", _is_url, "http://localhost:3000"),
    EnvCheck("APP_KEY", True, "Application secret key", lambda v: len(v) >= 32, "32+ random characters"),
    EnvCheck("FRONTEND_URL", False, "Public site URL used in magic links", _is_url, "http://localhost:3000"),
    EnvCheck("APP_URL", False, "Public URL of this API", _is_url, "http://localhost:3333"),
    EnvCheck(
        "NODE_ENV",
        False,
        "Runtime environment",
        lambda v: v in ("development", "production", "test"),
        "development",
    ),
    EnvCheck(
        "STORAGE_PROVIDER", False, "Upload strategy", lambda v: v in ("r2", "s3", "fs", "dual"), "r2"
    ),
]


def mask(name: str, value: str) -> str:
    if any(marker in name for marker in SENSITIVE_MARKERS):
        return f"{value[:4]}...{value[-4:]}" if len(value) > 12 else "***"
    return value


def check_environment(env: Optional[Mapping[str, str]] = None) -> List[CheckResult]:
    """Validate the variables of ``ENV_CHECKS``; ``DATABASE_URL`` replaces the ``DB_*`` parts."""
    env = os.environ if env is None else env
    has_database_url = bool(env.get("DATABASE_URL"))
    results = []
    for check in ENV_CHECKS:
        value = env.get(check.name)
        if not value:
            required = check.required and not (has_database_url and check.name.startswith("DB_"))
            status, message = ("missing", "Missing variable") if required else ("ok", "Not set")
            results.append(CheckResult(check.name, status, message))
        elif check.validator is not None and not check.validator(value):
            hint = f", expected like {check.example}" if check.example else ""
            results.append(CheckResult(check.name, "invalid", f"Invalid format{hint}", mask(check.name, value)))
        else:
            results.append(CheckResult(check.name, "ok", check.description, mask(check.name, value)))
    return results


async def check_database() -> CheckResult:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return CheckResult("database", "failed", str(e))
    return CheckResult("database", "ok", "Connected")


async def check_stripe() -> CheckResult:
    service = StripeService()
    if not service.config.secret_key:
        return CheckResult("stripe", "skipped", "STRIPE_SECRET_KEY not set")
    try:
        product = await service.get_product(service.config.product_id_pro)
    except ServiceError as e:
        return CheckResult("stripe", "failed", e.message)
    return CheckResult("stripe", "ok", f"Pro product '{product.get('name')}' reachable")


async def check_resend() -> CheckResult:
    service = EmailService()
    if not service.enabled:
        return CheckResult("resend", "skipped", "RESEND_API_KEY not set")
    try:
        status = await service.check_connection()
    except httpx.HTTPError as e:
        return CheckResult("resend", "failed", str(e))
    if status in (401, 403):
        return CheckResult("resend", "failed", f"API key rejected (HTTP {status})")
    return CheckResult("resend", "ok", f"Reachable (HTTP {status})")


async def check_storage() -> List[CheckResult]:
    try:
        manager = StorageManager()
    except ValueError as e:
        return [CheckResult("storage", "failed", str(e))]

    results = []
    for name, disk in manager.disks.items():
        if isinstance(disk, S3Disk) and not disk.configured:
            results.append(CheckResult(f"storage:{name}", "skipped", "Bucket or credentials not set"))
            continue
        try:
            await disk.exists(".healthcheck")
        except StorageError as e:
            results.append(CheckResult(f"storage:{name}", "failed", e.message))
            continue
        results.append(CheckResult(f"storage:{name}", "ok", "Reachable"))
    return results


async def check_services() -> List[CheckResult]:
    results = [await check_database(), await check_stripe(), await check_resend()]
    results.extend(await check_storage())
    return results


def summarize(results: List[CheckResult]) -> Dict[str, int]:
    summary: Dict[str, int] = {}
    for result in results:
        summary[result.status] = summary.get(result.status, 0) + 1
    logger.debug(f"Configuration check summary: {summary}")
    return summary
