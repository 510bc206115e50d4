"""
Unit tests for the Resend email client, using an httpx mock transport.
"""

import json

import httpx
import pytest

from ona_ui.server.core.config import EmailConfig
from ona_ui.server.services.email import EmailService

pytestmark = pytest.mark.asyncio

API_URL = "http://mock.resend"


def email_service(handler) -> EmailService:
    config = EmailConfig(resend_api_key="re_test_key", sender="Ona UI <hello@ona-ui.com>", api_url=API_URL)
    return EmailService(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def test_disabled_without_api_key():
    service = EmailService(EmailConfig(resend_api_key=None))

    assert service.enabled is False
    assert await service.send_email("a@b.co", "Hi", "<p>Hi</p>") is None


async def test_send_email_payload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_123"})

    result = await email_service(handler).send_email(["a@b.co", "c@d.co"], "Hello", "<p>Hello</p>", text="Hello")

    assert result == {"id": "email_123"}
    assert captured["url"] == f"{API_URL}/emails"
    assert captured["auth"] == "Bearer re_test_key"
    assert captured["body"] == {
        "from": "Ona UI <hello@ona-ui.com>",
        "to": ["a@b.co", "c@d.co"],
        "subject": "Hello",
        "html": "<p>Hello</p>",
        "text": "Hello",
    }


async def test_rejected_message_raises():
    service = email_service(lambda request: httpx.Response(422, json={"message": "Invalid `to` field"}))

    with pytest.raises(httpx.HTTPStatusError):
        await service.send_email("bad", "Hello", "<p>Hello</p>")


async def test_magic_link_email_mentions_link_and_ttl():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(json.loads(request.content))
        return httpx.Response(200, json={"id": "email_1"})

    await email_service(handler).send_magic_link_email("a@b.co", "http://localhost:3000/auth?token=t", 300)

    assert captured["subject"] == "Sign in to Ona UI"
    assert "http://localhost:3000/auth?token=t" in captured["html"]
    assert "expires in 5 minutes" in captured["html"]


async def test_welcome_email_names_the_plan():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(json.loads(request.content))
        return httpx.Response(200, json={"id": "email_2"})

    await email_service(handler).send_welcome_email("a@b.co", "http://localhost:3000/x", 86400, tier="team")

    assert captured["subject"] == "Welcome to Ona UI Team"


async def test_check_connection_returns_status():
    service = email_service(lambda request: httpx.Response(401, json={"message": "API key is invalid"}))

    assert await service.check_connection() == 401
