"""
Email Service.

Sends transactional email through the Resend HTTP API.

- ``POST {RESEND_API_URL}/emails`` with a bearer API key.
- A missing API key disables sending: messages are logged and skipped.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import httpx

from ona_ui.core.logging_config import get_logger
from ona_ui.server.core.config import EmailConfig, settings

logger = get_logger(__name__)


MAGIC_LINK_HTML = """<!DOCTYPE html>
<html>
<body style="font-family: system-ui, -apple-system, sans-serif; color: #111827;">
  <h1 style="font-size: 20px;">{heading}</h1>
  <p>{intro}</p>
  <p>
    <a href="{url}" style="display: inline-block; padding: 12px 20px; background: #111827;
       color: #ffffff; text-decoration: none; border-radius: 6px;">Sign in to Ona UI</a>
  </p>
  <p style="color: #6b7280; font-size: 13px;">This link expires in {minutes} minutes and can be used once.
  If you did not request it, you can ignore this email.</p>
</body>
</html>"""


class EmailService:
    """Thin async client of the Resend API."""

    def __init__(self, config: Optional[EmailConfig] = None, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config or settings.email
        self._http = client

    @property
    def enabled(self) -> bool:
        return bool(self._config.resend_api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.resend_api_key}",
            "Content-Type": "application/json",
        }

    async def send_email(
        self,
        to: Union[str, List[str]],
        subject: str,
        html: str,
        text: Optional[str] = None,
        sender: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Send one email.

        Returns:
            The Resend response payload (contains the message ``id``), or None
            when sending is disabled.

        Raises:
            httpx.HTTPStatusError: Resend rejected the message.
            httpx.TransportError: Resend could not be reached.
        """
        recipients = [to] if isinstance(to, str) else list(to)
        if not self.enabled:
            logger.warning(f"RESEND_API_KEY is not set, skipping email '{subject}' to {recipients}")
            return None

        payload: Dict[str, Any] = {
            "from": sender or self._config.sender,
            "to": recipients,
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        url = f"{self._config.api_url.rstrip('/')}/emails"
        logger.debug(f"EmailService.send_email: POST {url} to={recipients}")
        if self._http is not None:
            response = await self._http.post(url, json=payload, headers=self._headers())
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        response.raise_for_status()
        data = response.json()
        logger.info(f"Email '{subject}' sent to {recipients} (id={data.get('id')})")
        return data

    async def send_magic_link_email(self, email: str, url: str, ttl_seconds: int) -> Optional[Dict[str, Any]]:
        html = MAGIC_LINK_HTML.format(
            heading="Your sign-in link",
            intro="Click the button below to sign in to your Ona UI account.",
            url=url,
            minutes=max(1, ttl_seconds // 60),
        )
        text = f"Sign in to Ona UI: {url}"
        return await self.send_email(email, "Sign in to Ona UI", html, text)

    async def send_welcome_email(
        self, email: str, url: str, ttl_seconds: int, tier: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Welcome a new customer with a magic link to their dashboard."""
        plan = f" {tier.capitalize()}" if tier else ""
        html = MAGIC_LINK_HTML.format(
            heading=f"Welcome to Ona UI{plan}!",
            intro="Thank you for your purchase. Your license is ready, sign in to access every component.",
            url=url,
            minutes=max(1, ttl_seconds // 60),
        )
        text = f"Welcome to Ona UI{plan}! Sign in to access your license: {url}"
        return await self.send_email(email, f"Welcome to Ona UI{plan}", html, text)

    async def check_connection(self) -> int:
        """Call ``GET /domains`` with the API key and return the HTTP status."""
        url = f"{self._config.api_url.rstrip('/')}/domains"
        if self._http is not None:
            response = await self._http.get(url, headers=self._headers())
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(url, headers=self._headers())
        return response.status_code


def get_email_service() -> EmailService:
    return EmailService()
