"""
Stripe Webhook Endpoints.

Receives signed Stripe events. The raw body is verified against the
endpoint secret before anything is dispatched; events of unsupported types
are acknowledged and reported as not processed.
"""

from typing import Optional

from fastapi import APIRouter, Header, Request

from ona_ui.core.database.base import utc_now
from ona_ui.core.errors import ValidationError
from ona_ui.core.models.io import ApiResponse, ok
from ona_ui.core.models.io.payments import WebhookResult, WebhookStats
from ona_ui.server.core import constant
from ona_ui.server.services.deps import EmailServiceDep, SessionDep, StripeServiceDep
from ona_ui.server.services.payment_processing import PaymentProcessingService
from ona_ui.server.services.webhooks import SUPPORTED_EVENTS, StripeWebhookService

router = APIRouter(tags=["webhooks"])

STRIPE_WEBHOOK_PATH = f"{constant.API_PUBLIC_STR}/webhooks/stripe"


@router.post(
    "/stripe",
    response_model=ApiResponse[WebhookResult],
    summary="Stripe Webhook",
    description="Verify and process a Stripe event (checkout completed or expired, payment failed).",
    response_description="Whether the event was processed.",
    responses={
        200: {"description": "Event received"},
        422: {"description": "Missing or invalid signature, or empty body"},
    },
)
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    stripe_service: StripeServiceDep,
    email_service: EmailServiceDep,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
):
    """
    Handle a Stripe webhook call.

    - **stripe-signature**: Signature header set by Stripe.
    """
    if not stripe_signature:
        raise ValidationError("Missing stripe-signature header")
    payload = await request.body()
    if not payload:
        raise ValidationError("Empty webhook payload")

    event = stripe_service.construct_event(payload, stripe_signature)
    service = StripeWebhookService(PaymentProcessingService(session, email_service=email_service), stripe_service)
    result = await service.handle_event(event)
    return ok(WebhookResult(**result))


@router.get(
    "/stripe/stats",
    response_model=ApiResponse[WebhookStats],
    summary="Stripe Webhook Status",
    description="Describe the webhook endpoint and the event types it handles.",
    response_description="Webhook endpoint status.",
)
async def stripe_webhook_stats():
    return ok(
        WebhookStats(
            endpoint=STRIPE_WEBHOOK_PATH,
            status="active",
            supported_events=list(SUPPORTED_EVENTS),
            last_check=utc_now().isoformat(),
        )
    )
