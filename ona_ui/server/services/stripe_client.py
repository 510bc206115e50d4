"""
Stripe Service.

Wrapper of the (blocking) Stripe SDK: every call runs in a worker thread and
Stripe failures are re-raised as ``ServiceError(code="STRIPE_API_ERROR")``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import stripe

from ona_ui.core.errors import ServiceError, ValidationError
from ona_ui.core.logging_config import get_logger
from ona_ui.server.core.config import StripeConfig, settings
from ona_ui.server.core.products import get_product_config

logger = get_logger(__name__)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Plain ``dict`` of a Stripe object (nested objects included)."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    return obj.to_dict()


def id_of(value: Any) -> Optional[str]:
    """Stripe fields may hold an id or an expanded object."""
    if isinstance(value, dict):
        return value.get("id")
    return value


class StripeService:
    """Checkout sessions, products and prices."""

    def __init__(self, config: Optional[StripeConfig] = None) -> None:
        self.config = config or settings.stripe

    async def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if not self.config.secret_key:
            raise ServiceError("Stripe is not configured", code="STRIPE_NOT_CONFIGURED", status_code=503)
        try:
            return await asyncio.to_thread(fn, *args, api_key=self.config.secret_key, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe call '{operation}' failed: {e}")
            raise ServiceError(
                f"Stripe error: {e.user_message or str(e)}",
                code="STRIPE_API_ERROR",
                status_code=400,
                details={"stripe_code": e.code, "request_id": e.request_id},
            ) from e

    async def get_product_prices(self, product_id: str) -> List[Dict[str, Any]]:
        if not product_id:
            raise ValidationError("Product id is required")
        prices = await self._call("prices.list", stripe.Price.list, product=product_id, active=True)
        return [to_dict(price) for price in prices.data]

    async def _create_session(
        self,
        price_id: str,
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str],
        metadata: Dict[str, str],
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_creation": "always",
            "billing_address_collection": "required",
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email

        session = to_dict(await self._call("checkout.sessions.create", stripe.checkout.Session.create, **params))
        if not session.get("id") or not session.get("url"):
            raise ServiceError("Stripe returned an incomplete checkout session", code="STRIPE_SESSION_ERROR")
        logger.info(f"Created checkout session {session['id']} for price {price_id}")
        return {"session_id": session["id"], "url": session["url"]}

    def _default_urls(self) -> tuple[str, str]:
        base = settings.auth.frontend_url.rstrip("/")
        return f"{base}/payment/success?session_id={{CHECKOUT_SESSION_ID}}", f"{base}/pricing"

    async def create_checkout_session_for_product(
        self,
        public_id: str,
        customer_email: Optional[str] = None,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Checkout for a public product id, paying the product's first active price."""
        product = get_product_config(public_id)
        if product is None:
            raise ValidationError(f"Unknown product '{public_id}'", details={"public_id": public_id})

        prices = await self.get_product_prices(product.stripe_product_id)
        active = next((price for price in prices if price.get("active")), None)
        if active is None:
            raise ServiceError(
                f"No active price for product {product.stripe_product_id}",
                code="NO_ACTIVE_PRICE",
                status_code=400,
                details={"product_id": product.stripe_product_id},
            )

        default_success, default_cancel = self._default_urls()
        return await self._create_session(
            active["id"],
            success_url or default_success,
            cancel_url or default_cancel,
            customer_email,
            {
                **product.metadata,
                "public_id": public_id,
                "product_id": product.stripe_product_id,
                "price_id": active["id"],
                **(metadata or {}),
            },
        )

    async def create_checkout_session(
        self,
        price_id: str,
        customer_email: Optional[str] = None,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Checkout for a raw Stripe price id."""
        default_success, default_cancel = self._default_urls()
        return await self._create_session(
            price_id, success_url or default_success, cancel_url or default_cancel, customer_email, metadata or {}
        )

    async def get_checkout_session(self, session_id: str) -> Dict[str, Any]:
        if not session_id:
            raise ValidationError("Session id is required")
        session = await self._call(
            "checkout.sessions.retrieve",
            stripe.checkout.Session.retrieve,
            session_id,
            expand=["customer", "payment_intent"],
        )
        return to_dict(session)

    async def get_session_status(self, session_id: str) -> Dict[str, Any]:
        session = await self.get_checkout_session(session_id)
        details = session.get("customer_details") or {}
        return {
            "session_id": session_id,
            "status": session.get("status"),
            "payment_status": session.get("payment_status"),
            "customer_email": session.get("customer_email") or details.get("email"),
            "amount_total": session.get("amount_total"),
            "currency": session.get("currency"),
        }

    async def is_session_paid(self, session_id: str) -> bool:
        session = await self.get_checkout_session(session_id)
        return session.get("payment_status") == "paid"

    async def get_product(self, product_id: str) -> Dict[str, Any]:
        return to_dict(await self._call("products.retrieve", stripe.Product.retrieve, product_id))

    async def get_price(self, price_id: str) -> Dict[str, Any]:
        return to_dict(await self._call("prices.retrieve", stripe.Price.retrieve, price_id))

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        return to_dict(await self._call("customers.retrieve", stripe.Customer.retrieve, customer_id))

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Verify a webhook payload against the endpoint secret.

        Raises:
            ValidationError: Missing secret, bad signature or malformed payload.
        """
        if not self.config.webhook_secret:
            raise ValidationError("Stripe webhook secret is not configured")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.config.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Invalid Stripe webhook signature: {e}")
            raise ValidationError("Invalid Stripe signature") from e
        except ValueError as e:
            logger.warning(f"Malformed Stripe webhook payload: {e}")
            raise ValidationError("Invalid webhook payload") from e
        return to_dict(event)


def get_stripe_service() -> StripeService:
    return StripeService()
