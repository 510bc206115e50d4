"""
Unit tests for the Stripe service wrapper. The Stripe SDK is patched.
"""

from unittest.mock import Mock, patch

import pytest
import stripe

from ona_ui.core.errors import ServiceError, ValidationError
from ona_ui.server.core.config import StripeConfig
from ona_ui.server.services.stripe_client import StripeService, id_of, to_dict

pytestmark = pytest.mark.asyncio

PRICE = {"id": "price_pro", "product": "prod_example_pro", "active": True, "unit_amount": 7000, "currency": "eur"}


@pytest.fixture
def stripe_service():
    return StripeService(StripeConfig(secret_key="sk_test_dummy", webhook_secret="whsec_test_secret"))


class TestHelpers:
    async def test_id_of(self):
        assert id_of("pi_1") == "pi_1"
        assert id_of({"id": "pi_2", "object": "payment_intent"}) == "pi_2"
        assert id_of(None) is None

    async def test_to_dict(self):
        stripe_object = Mock()
        stripe_object.to_dict.return_value = {"id": "cs_1"}

        assert to_dict(None) == {}
        assert to_dict({"id": "x"}) == {"id": "x"}
        assert to_dict(stripe_object) == {"id": "cs_1"}


class TestCheckout:
    async def test_not_configured(self):
        with pytest.raises(ServiceError) as exc_info:
            await StripeService(StripeConfig()).get_price("price_1")

        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "STRIPE_NOT_CONFIGURED"

    async def test_checkout_for_product(self, stripe_service):
        with patch("stripe.Price.list", return_value=Mock(data=[PRICE])) as mock_list, patch(
            "stripe.checkout.Session.create", return_value={"id": "cs_1", "url": "https://checkout.stripe.com/cs_1"}
        ) as mock_create:
            created = await stripe_service.create_checkout_session_for_product("pro", customer_email="a@b.co")

        assert created == {"session_id": "cs_1", "url": "https://checkout.stripe.com/cs_1"}
        assert mock_list.call_args.kwargs["product"] == "prod_example_pro"
        params = mock_create.call_args.kwargs
        assert params["api_key"] == "sk_test_dummy"
        assert params["line_items"] == [{"price": "price_pro", "quantity": 1}]
        assert params["customer_email"] == "a@b.co"
        assert params["metadata"]["tier"] == "pro"
        assert params["metadata"]["public_id"] == "pro"
        assert "{CHECKOUT_SESSION_ID}" in params["success_url"]

    async def test_unknown_product(self, stripe_service):
        with pytest.raises(ValidationError):
            await stripe_service.create_checkout_session_for_product("platinum")

    async def test_product_without_active_price(self, stripe_service):
        with patch("stripe.Price.list", return_value=Mock(data=[])):
            with pytest.raises(ServiceError) as exc_info:
                await stripe_service.create_checkout_session_for_product("team")

        assert exc_info.value.code == "NO_ACTIVE_PRICE"

    async def test_incomplete_session(self, stripe_service):
        with patch("stripe.checkout.Session.create", return_value={"id": "cs_1"}):
            with pytest.raises(ServiceError) as exc_info:
                await stripe_service.create_checkout_session("price_1")

        assert exc_info.value.code == "STRIPE_SESSION_ERROR"

    async def test_stripe_error_is_wrapped(self, stripe_service):
        error = stripe.InvalidRequestError("No such price: 'price_x'", param="price", code="resource_missing")

        with patch("stripe.Price.retrieve", side_effect=error):
            with pytest.raises(ServiceError) as exc_info:
                await stripe_service.get_price("price_x")

        assert exc_info.value.code == "STRIPE_API_ERROR"
        assert exc_info.value.status_code == 400
        assert exc_info.value.details["stripe_code"] == "resource_missing"

    async def test_session_status(self, stripe_service):
        session = {
            "id": "cs_1",
            "status": "complete",
            "payment_status": "paid",
            "customer_email": None,
            "customer_details": {"email": "buyer@example.com"},
            "amount_total": 7000,
            "currency": "eur",
        }
        with patch("stripe.checkout.Session.retrieve", return_value=session) as mock_retrieve:
            status = await stripe_service.get_session_status("cs_1")

        assert status["customer_email"] == "buyer@example.com"
        assert status["payment_status"] == "paid"
        assert mock_retrieve.call_args.kwargs["expand"] == ["customer", "payment_intent"]


class TestWebhookEvents:
    async def test_missing_secret(self):
        with pytest.raises(ValidationError):
            StripeService(StripeConfig(secret_key="sk_test_dummy")).construct_event(b"{}", "t=1,v1=x")

    async def test_bad_signature(self, stripe_service):
        with pytest.raises(ValidationError, match="Invalid Stripe signature"):
            stripe_service.construct_event(b'{"id": "evt_1"}', "t=1,v1=deadbeef")
