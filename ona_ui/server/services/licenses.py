"""
License Service.

Issues license keys for completed payments and answers the access questions
the rest of the API asks: does this user hold a valid license, which tier,
and does it cover a given component.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.base import utc_now
from ona_ui.core.database.entities import License, LicenseTier, PaymentStatus
from ona_ui.core.database.entities.enums import TIER_ORDER
from ona_ui.core.database.repositories import LicenseRepository, UserRepository
from ona_ui.core.errors import ConflictError, NotFoundError, ServiceError
from ona_ui.core.logging_config import get_logger

logger = get_logger(__name__)

LICENSE_KEY_PREFIX = "ONA"
MAX_KEY_ATTEMPTS = 10

DEFAULT_SEATS = {
    LicenseTier.FREE: 1,
    LicenseTier.PRO: 1,
    LicenseTier.TEAM: 5,
    LicenseTier.ENTERPRISE: 25,
}


def format_license_key() -> str:
    """Random ``ONA-XXXX-XXXX-XXXX`` key with uppercase hex segments."""
    segments = [secrets.token_hex(2).upper() for _ in range(3)]
    return "-".join([LICENSE_KEY_PREFIX, *segments])


def tier_satisfies(user_tier: Optional[LicenseTier], required_tier: LicenseTier) -> bool:
    if user_tier is None:
        return False
    return TIER_ORDER[user_tier] >= TIER_ORDER[required_tier]


class LicenseService:
    """Service for license issuance and validation."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.licenses = LicenseRepository(session)
        self.users = UserRepository(session)

    async def generate_unique_key(self) -> str:
        for _ in range(MAX_KEY_ATTEMPTS):
            key = format_license_key()
            if not await self.licenses.key_exists(key):
                return key
        raise ServiceError("Could not generate a unique license key", code="LICENSE_KEY_GENERATION_FAILED")

    async def create_license(
        self,
        user_id: str,
        tier: LicenseTier,
        stripe_payment_id: Optional[str] = None,
        stripe_customer_id: Optional[str] = None,
        amount_paid: int = 0,
        currency: str = "USD",
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        is_lifetime: bool = True,
        seats_allowed: Optional[int] = None,
        is_early_bird: bool = False,
        discount_percentage: int = 0,
        discount_code: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> License:
        """
        Create a license for an existing user.

        Lifetime licenses never expire; the others are valid for one year.

        Raises:
            NotFoundError: The user does not exist.
            ConflictError: A license already exists for the Stripe payment.
        """
        if await self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)
        if stripe_payment_id and await self.licenses.get_by_stripe_payment_id(stripe_payment_id):
            raise ConflictError(
                "A license already exists for this payment", details={"stripe_payment_id": stripe_payment_id}
            )

        now = utc_now()
        license = License(
            user_id=user_id,
            license_key=await self.generate_unique_key(),
            tier=tier,
            stripe_payment_id=stripe_payment_id,
            stripe_customer_id=stripe_customer_id,
            amount_paid=amount_paid,
            currency=currency.upper(),
            payment_status=payment_status,
            seats_allowed=seats_allowed or DEFAULT_SEATS[tier],
            valid_from=now,
            valid_until=None if is_lifetime else now + timedelta(days=365),
            is_lifetime=is_lifetime,
            is_early_bird=is_early_bird,
            discount_percentage=discount_percentage,
            discount_code=discount_code,
            notes=notes,
        )
        license = await self.licenses.create(license)
        logger.info(f"Created {tier.value} license {license.license_key} for user {user_id}")
        return license

    async def validate_license(self, license_key: str) -> Dict[str, Any]:
        """Return ``{is_valid, license, reason}`` for a license key."""
        license = await self.licenses.get_by_key(license_key)
        if license is None:
            return {"is_valid": False, "license": None, "reason": "License not found"}
        if not license.is_active:
            return {"is_valid": False, "license": license, "reason": "License is deactivated"}
        if license.payment_status != PaymentStatus.COMPLETED:
            return {"is_valid": False, "license": license, "reason": "Payment not completed"}
        if not license.is_lifetime and license.valid_until is not None and license.valid_until <= utc_now():
            return {"is_valid": False, "license": license, "reason": "License has expired"}
        return {"is_valid": True, "license": license, "reason": None}

    async def get_user_licenses(self, user_id: str) -> List[License]:
        return await self.licenses.list_by_user(user_id)

    async def get_active_licenses(self, user_id: str) -> List[License]:
        return await self.licenses.list_valid_for_user(user_id, utc_now())

    async def get_highest_license(self, user_id: str) -> Optional[License]:
        return await self.licenses.get_highest_for_user(user_id, utc_now())

    async def has_access(self, user_id: str, required_tier: LicenseTier) -> bool:
        highest = await self.get_highest_license(user_id)
        return highest is not None and tier_satisfies(highest.tier, required_tier)

    async def deactivate_license(self, license_id: str, reason: Optional[str] = None) -> License:
        license = await self.licenses.get_by_id(license_id)
        if license is None:
            raise NotFoundError("License", license_id)
        license.is_active = False
        if reason:
            stamp = utc_now().isoformat(timespec="seconds")
            entry = f"[{stamp}] Deactivated: {reason}"
            license.notes = f"{license.notes}\n{entry}" if license.notes else entry
        license = await self.licenses.update(license)
        logger.info(f"Deactivated license {license.license_key}: {reason or 'no reason given'}")
        return license

    async def update_payment_status(self, license_id: str, payment_status: PaymentStatus) -> License:
        license = await self.licenses.get_by_id(license_id)
        if license is None:
            raise NotFoundError("License", license_id)
        license.payment_status = payment_status
        return await self.licenses.update(license)

    async def get_stats(self) -> Dict[str, Any]:
        return await self.licenses.stats()

