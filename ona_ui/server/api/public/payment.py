"""
Public Payment Endpoints.

Stripe checkout for license products: configuration for the frontend,
checkout session creation and status, payment verification and product or
price lookups.
"""

from fastapi import APIRouter, Path, status

from ona_ui.core.database.repositories import LicenseRepository
from ona_ui.core.errors import NotFoundError
from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.payments import (
    CheckoutSessionCreated,
    CheckoutSessionRequest,
    CheckoutSessionStatus,
    PaymentConfig,
    PaymentVerification,
    PriceInfo,
    ProductInfo,
    VerifyPaymentRequest,
)
from ona_ui.server.core.products import get_available_public_ids, get_product_config
from ona_ui.server.services.deps import SessionDep, StripeServiceDep
from ona_ui.server.services.stripe_client import id_of

router = APIRouter(tags=["payment"])


def _price_info(price: dict) -> PriceInfo:
    return PriceInfo(
        id=price["id"],
        product=id_of(price.get("product")),
        unit_amount=price.get("unit_amount"),
        currency=price.get("currency"),
        active=price.get("active", True),
        type=price.get("type"),
    )


@router.get(
    "/config",
    response_model=ApiResponse[PaymentConfig],
    summary="Payment Configuration",
    description="Publishable Stripe key and the purchasable product ids.",
    response_description="Frontend payment configuration.",
)
async def get_config(stripe_service: StripeServiceDep):
    return ok(
        PaymentConfig(publishable_key=stripe_service.config.publishable_key, products=get_available_public_ids())
    )


@router.post(
    "/create-checkout-session",
    response_model=ApiResponse[CheckoutSessionCreated],
    status_code=status.HTTP_201_CREATED,
    summary="Create Checkout Session",
    description="Create a Stripe checkout session for a license product (publicId) or a raw Stripe price (priceId).",
    response_description="The checkout session id and its hosted URL.",
    responses={
        201: {"description": "Checkout session created"},
        400: {"description": "Stripe rejected the request or the product has no active price"},
        422: {"description": "Neither publicId nor priceId given, or unknown product"},
        503: {"description": "Stripe is not configured"},
    },
)
async def create_checkout_session(body: CheckoutSessionRequest, stripe_service: StripeServiceDep):
    """
    Create a checkout session.

    - **publicId**: ``pro``, ``team`` or ``enterprise``; takes precedence over **priceId**.
    - **priceId**: A Stripe price id.
    - **customerEmail**: Optional email to prefill.
    - **successUrl** / **cancelUrl**: Optional redirect overrides.
    """
    if body.public_id:
        created = await stripe_service.create_checkout_session_for_product(
            body.public_id, body.customer_email, body.success_url, body.cancel_url, body.metadata
        )
    else:
        created = await stripe_service.create_checkout_session(
            body.price_id, body.customer_email, body.success_url, body.cancel_url, body.metadata
        )
    return ok(CheckoutSessionCreated(**created), message="Checkout session created")


@router.get(
    "/session/{session_id}",
    response_model=ApiResponse[dict],
    summary="Get Checkout Session",
    description="Retrieve a Stripe checkout session with its customer and payment intent expanded.",
    response_description="The Stripe checkout session object.",
)
async def get_session(stripe_service: StripeServiceDep, session_id: str = Path(..., min_length=1)):
    return ok(await stripe_service.get_checkout_session(session_id))


@router.get(
    "/session/{session_id}/status",
    response_model=ApiResponse[CheckoutSessionStatus],
    summary="Get Checkout Session Status",
    description="Status, payment status, customer email and amount of a checkout session.",
    response_description="The session status.",
)
async def get_session_status(stripe_service: StripeServiceDep, session_id: str = Path(..., min_length=1)):
    return ok(await stripe_service.get_session_status(session_id))


@router.post(
    "/verify",
    response_model=ApiResponse[PaymentVerification],
    summary="Verify Payment",
    description="Check whether a checkout session is paid and return the license it produced, if any.",
    response_description="The verification result.",
)
async def verify_payment(body: VerifyPaymentRequest, session: SessionDep, stripe_service: StripeServiceDep):
    """
    Verify a payment after the Stripe redirect.

    The license is created by the webhook, so **license_key** may still be null
    right after a successful payment.

    - **sessionId**: The checkout session id from the success URL.
    """
    checkout = await stripe_service.get_checkout_session(body.session_id)
    paid = checkout.get("payment_status") == "paid"
    license_key = None
    payment_intent_id = id_of(checkout.get("payment_intent"))
    if paid and payment_intent_id:
        license = await LicenseRepository(session).get_by_stripe_payment_id(payment_intent_id)
        license_key = license.license_key if license else None
    return ok(
        PaymentVerification(
            session_id=body.session_id,
            paid=paid,
            payment_status=checkout.get("payment_status"),
            customer_email=checkout.get("customer_email") or (checkout.get("customer_details") or {}).get("email"),
            amount_total=checkout.get("amount_total"),
            license_key=license_key,
        )
    )


@router.get(
    "/product/{public_id}",
    response_model=ApiResponse[ProductInfo],
    summary="Get Product",
    description="Retrieve a license product and its active price from Stripe.",
    response_description="The product with its price.",
    responses={404: {"description": "Unknown public product id"}},
)
async def get_product(public_id: str, stripe_service: StripeServiceDep):
    """
    Get product by public id.

    - **public_id**: ``pro``, ``team`` or ``enterprise``.
    """
    config = get_product_config(public_id)
    if config is None:
        raise NotFoundError("Product", public_id)
    product = await stripe_service.get_product(config.stripe_product_id)
    prices = await stripe_service.get_product_prices(config.stripe_product_id)
    active = next((price for price in prices if price.get("active")), None)
    return ok(
        ProductInfo(
            public_id=public_id,
            id=product["id"],
            name=product.get("name") or config.name,
            description=product.get("description") or config.description,
            active=product.get("active", True),
            metadata={**config.metadata, **(product.get("metadata") or {})},
            price=_price_info(active) if active else None,
        )
    )


@router.get(
    "/price/{price_id}",
    response_model=ApiResponse[PriceInfo],
    summary="Get Price",
    description="Retrieve a Stripe price.",
    response_description="The price.",
)
async def get_price(price_id: str, stripe_service: StripeServiceDep):
    return ok(_price_info(await stripe_service.get_price(price_id)))
