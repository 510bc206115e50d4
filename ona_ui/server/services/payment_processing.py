"""
Payment Processing Service.

Turns Stripe checkout outcomes into accounts and licenses:

1. refuse sessions that already produced a license,
2. get or create the customer's user account,
3. pick the license tier,
4. create a completed lifetime license,
5. email a welcome magic link (best effort).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.entities import LicenseTier, PaymentStatus
from ona_ui.core.database.repositories import LicenseRepository
from ona_ui.core.errors import ConflictError
from ona_ui.core.logging_config import get_logger

from .auth import AuthService
from .email import EmailService
from .licenses import LicenseService
from .users import UserService

logger = get_logger(__name__)

PAID_TIERS = (LicenseTier.PRO, LicenseTier.TEAM, LicenseTier.ENTERPRISE)

# Thresholds in major currency units
ENTERPRISE_MIN_AMOUNT = 500
TEAM_MIN_AMOUNT = 200


@dataclass
class CheckoutSessionData:
    """The parts of a ``checkout.session.completed`` event the processing needs."""

    session_id: str
    customer_email: str
    amount_total: int
    currency: str
    payment_intent_id: Optional[str] = None
    customer_id: Optional[str] = None
    payment_status: str = "paid"
    metadata: Dict[str, str] = field(default_factory=dict)


def determine_license_tier(amount_total: int, metadata: Optional[Dict[str, Any]] = None) -> LicenseTier:
    """Tier from ``metadata["tier"]`` when it names a paid tier, otherwise from the amount paid (cents)."""
    tier = str((metadata or {}).get("tier") or "").lower()
    for paid in PAID_TIERS:
        if tier == paid.value:
            return paid

    amount = amount_total / 100
    if amount >= ENTERPRISE_MIN_AMOUNT:
        return LicenseTier.ENTERPRISE
    if amount >= TEAM_MIN_AMOUNT:
        return LicenseTier.TEAM
    return LicenseTier.PRO


class PaymentProcessingService:
    """Service orchestrating user, license and email work after a payment."""

    def __init__(self, session: AsyncSession, email_service: Optional[EmailService] = None):
        self.session = session
        self.email_service = email_service or EmailService()
        self.licenses = LicenseRepository(session)
        self.license_service = LicenseService(session)
        self.user_service = UserService(session)
        self.auth_service = AuthService(session, email_service=self.email_service)

    async def _check_duplicate(self, session_id: str, payment_intent_id: Optional[str]) -> None:
        if payment_intent_id and await self.licenses.get_by_stripe_payment_id(payment_intent_id):
            raise ConflictError(
                "Payment already processed", details={"payment_intent_id": payment_intent_id}
            )
        if await self.licenses.find_by_checkout_session(session_id):
            raise ConflictError("Checkout session already processed", details={"session_id": session_id})

    async def _send_welcome(self, email: str, tier: LicenseTier) -> bool:
        try:
            url = await self.auth_service.issue_magic_link(email, callback_url="/dashboard")
            sent = await self.email_service.send_welcome_email(
                email, url, self.auth_service.config.magic_link_ttl_seconds, tier.value
            )
        except Exception as e:
            logger.error(f"Failed to send welcome magic link to {email}: {e}", exc_info=True)
            return False
        return sent is not None

    async def process_checkout_session_completed(self, data: CheckoutSessionData) -> Dict[str, Any]:
        """
        Handle a paid checkout session.

        Never raises: failures are reported as ``success=False`` with the
        error message so the webhook can acknowledge the event.
        """
        logger.info(f"Processing checkout session {data.session_id} ({data.amount_total} {data.currency})")
        try:
            await self._check_duplicate(data.session_id, data.payment_intent_id)
            user, is_new_user = await self.user_service.get_or_create_by_email(data.customer_email)
            tier = determine_license_tier(data.amount_total, data.metadata)
            license = await self.license_service.create_license(
                user_id=user.id,
                tier=tier,
                stripe_payment_id=data.payment_intent_id,
                stripe_customer_id=data.customer_id,
                amount_paid=data.amount_total,
                currency=data.currency.upper(),
                payment_status=PaymentStatus.COMPLETED,
                is_lifetime=True,
                notes=f"Created from Stripe webhook - Session: {data.session_id}",
            )
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to process checkout session {data.session_id}: {e}", exc_info=True)
            return {
                "success": False,
                "user_id": None,
                "license_id": None,
                "license_key": None,
                "is_new_user": False,
                "magic_link_sent": False,
                "error": str(e),
            }

        magic_link_sent = await self._send_welcome(user.email, tier)
        logger.info(
            f"Checkout session {data.session_id} processed: user={user.id} new={is_new_user} "
            f"license={license.license_key} magic_link_sent={magic_link_sent}"
        )
        return {
            "success": True,
            "user_id": user.id,
            "license_id": license.id,
            "license_key": license.license_key,
            "is_new_user": is_new_user,
            "magic_link_sent": magic_link_sent,
            "error": None,
        }

    async def process_checkout_session_expired(self, session_id: str) -> None:
        logger.info(f"Checkout session expired: {session_id}")

    async def process_payment_failed(self, payment_intent_id: str, reason: Optional[str] = None) -> bool:
        """Mark the license of a failed payment as failed and deactivate it.

        Returns:
            True when a license was found for the payment intent.
        """
        license = await self.licenses.get_by_stripe_payment_id(payment_intent_id)
        if license is None:
            logger.info(f"No license for failed payment {payment_intent_id}")
            return False
        await self.license_service.update_payment_status(license.id, PaymentStatus.FAILED)
        await self.license_service.deactivate_license(license.id, f"Payment failed: {reason or 'unknown reason'}")
        return True
