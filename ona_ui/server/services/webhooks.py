"""
Stripe webhook dispatcher.

Routes verified Stripe events to the payment processing service by type.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ona_ui.core.errors import ServiceError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.monitoring import log_payment_event

from .payment_processing import CheckoutSessionData, PaymentProcessingService
from .stripe_client import StripeService, id_of

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_EXPIRED = "checkout.session.expired"
PAYMENT_FAILED = "payment_intent.payment_failed"

SUPPORTED_EVENTS = (CHECKOUT_COMPLETED, CHECKOUT_EXPIRED, PAYMENT_FAILED)


class StripeWebhookService:
    """Handle one verified Stripe event."""

    def __init__(self, payments: PaymentProcessingService, stripe_service: StripeService):
        self.payments = payments
        self.stripe_service = stripe_service

    async def _customer_email(self, session: Dict[str, Any]) -> Optional[str]:
        email = session.get("customer_email") or (session.get("customer_details") or {}).get("email")
        if email:
            return email
        customer_id = id_of(session.get("customer"))
        if not customer_id:
            return None
        try:
            customer = await self.stripe_service.get_customer(customer_id)
        except ServiceError as e:
            logger.error(f"Failed to retrieve Stripe customer {customer_id}: {e}")
            return None
        if customer.get("deleted"):
            return None
        return customer.get("email")

    async def _checkout_completed(self, session: Dict[str, Any]) -> tuple[bool, str]:
        if session.get("payment_status") != "paid":
            return False, f"Payment status is '{session.get('payment_status')}', nothing to process"

        email = await self._customer_email(session)
        if not email:
            return False, "No customer email on checkout session"

        result = await self.payments.process_checkout_session_completed(
            CheckoutSessionData(
                session_id=session["id"],
                customer_email=email,
                amount_total=session.get("amount_total") or 0,
                currency=session.get("currency") or "eur",
                payment_intent_id=id_of(session.get("payment_intent")),
                customer_id=id_of(session.get("customer")),
                payment_status=session.get("payment_status"),
                metadata=session.get("metadata") or {},
            )
        )
        if not result["success"]:
            return False, f"Checkout processing failed: {result['error']}"
        return True, f"License {result['license_key']} created for user {result['user_id']}"

    async def _payment_failed(self, intent: Dict[str, Any]) -> tuple[bool, str]:
        error = intent.get("last_payment_error") or {}
        found = await self.payments.process_payment_failed(intent["id"], error.get("message"))
        if not found:
            return True, "No license linked to this payment"
        return True, "License deactivated after failed payment"

    async def handle_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Dispatch on ``event["type"]``; unsupported types are acknowledged unprocessed."""
        event_id = event.get("id", "")
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}
        logger.info(f"Stripe event {event_id} received: {event_type}")

        try:
            if event_type == CHECKOUT_COMPLETED:
                processed, message = await self._checkout_completed(obj)
            elif event_type == CHECKOUT_EXPIRED:
                await self.payments.process_checkout_session_expired(obj.get("id", ""))
                processed, message = True, "Checkout session expiry recorded"
            elif event_type == PAYMENT_FAILED:
                processed, message = await self._payment_failed(obj)
            else:
                processed, message = False, "Unhandled event type"
        except Exception as e:
            # failures are acknowledged as unprocessed
            logger.error(f"Error processing Stripe event {event_id} ({event_type}): {e}", exc_info=True)
            processed, message = False, f"Processing error: {e}"

        log_payment_event(event_type, event_id, processed, message)
        return {"event_id": event_id, "event_type": event_type, "processed": processed, "message": message}
