"""
Payment and Stripe webhook I/O models.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator


class CheckoutSessionRequest(BaseModel):
    """Checkout request; either ``public_id`` (``pro``, ``team``, ``enterprise``) or a raw ``price_id``."""

    public_id: Optional[str] = Field(default=None, alias="publicId")
    price_id: Optional[str] = Field(default=None, alias="priceId")
    customer_email: Optional[EmailStr] = Field(default=None, alias="customerEmail")
    success_url: Optional[str] = Field(default=None, alias="successUrl")
    cancel_url: Optional[str] = Field(default=None, alias="cancelUrl")
    metadata: Dict[str, str] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _require_product(self) -> "CheckoutSessionRequest":
        if not self.public_id and not self.price_id:
            raise ValueError("Either publicId or priceId is required")
        return self


class CheckoutSessionCreated(BaseModel):
    session_id: str
    url: Optional[str] = None


class CheckoutSessionStatus(BaseModel):
    session_id: str
    status: Optional[str] = None
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    session_id: str = Field(alias="sessionId")

    model_config = {"populate_by_name": True}


class PaymentVerification(BaseModel):
    session_id: str
    paid: bool
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[int] = None
    license_key: Optional[str] = None


class PaymentConfig(BaseModel):
    publishable_key: Optional[str] = None
    products: List[str]
    currency: str = "eur"


class ProductInfo(BaseModel):
    public_id: Optional[str] = None
    id: str
    name: str
    description: Optional[str] = None
    active: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)
    price: Optional["PriceInfo"] = None


class PriceInfo(BaseModel):
    id: str
    product: Optional[str] = None
    unit_amount: Optional[int] = None
    currency: Optional[str] = None
    active: bool = True
    type: Optional[str] = None


class PaymentProcessingResult(BaseModel):
    """Outcome of a completed checkout."""

    success: bool
    user_id: Optional[str] = None
    license_id: Optional[str] = None
    license_key: Optional[str] = None
    is_new_user: bool = False
    magic_link_sent: bool = False
    error: Optional[str] = None


class WebhookResult(BaseModel):
    event_id: str
    event_type: str
    processed: bool
    message: str


class WebhookStats(BaseModel):
    endpoint: str
    status: str
    supported_events: List[str]
    last_check: str


ProductInfo.model_rebuild()
