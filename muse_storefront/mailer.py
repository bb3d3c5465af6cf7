"""Outbound email through the Brevo transactional API.

Two messages are sent: a contact form submission forwarded to the Muse
inbox (reply-to the visitor), and a welcome email to new newsletter
subscribers."""

import html
import logging
import re
from typing import Any, Dict, Optional

import httpx

from .config import (
    BREVO_API_KEY,
    BREVO_ENDPOINT,
    BREVO_SENDER_EMAIL,
    BREVO_SENDER_NAME,
    CONTACT_SENDER_NAME,
    DEFAULT_INBOX_EMAIL,
    DEFAULT_SENDER_EMAIL,
    HTTP_TIMEOUT,
    NEWSLETTER_SENDER_NAME,
)
from .models import ContactMessage

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationError(ValueError):
    """Submitted form data is incomplete or malformed."""


class MailerError(Exception):
    """The email provider could not accept the message."""


def validate_email(email: Optional[str]) -> str:
    if not email:
        raise ValidationError("Email is required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_contact(contact: ContactMessage) -> ContactMessage:
    if not all([contact.first_name, contact.last_name, contact.email, contact.message]):
        raise ValidationError("All fields are required")
    validate_email(contact.email)
    return contact


_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f9f9f9;">
  <div style="max-width: 600px; margin: 0 auto; background-color: white; padding: 40px 20px;">
    <div style="text-align: center; margin-bottom: 30px;">
      <h1 style="color: #800000; font-size: 28px; margin: 0;">{heading}</h1>
    </div>
{body}
  </div>
</body>
</html>
"""


def render_contact_html(contact: ContactMessage) -> str:
    name = html.escape(contact.full_name)
    body = f"""    <div style="background-color: #f8f8f8; padding: 30px; border-radius: 8px; margin-bottom: 30px;">
      <h2 style="color: #333; font-size: 22px; margin: 0 0 20px 0;">Contact Details</h2>
      <p style="color: #666; font-size: 16px; line-height: 1.6; margin: 10px 0;"><strong>Name:</strong> {name}</p>
      <p style="color: #666; font-size: 16px; line-height: 1.6; margin: 10px 0;"><strong>Email:</strong> {html.escape(contact.email)}</p>
    </div>
    <div style="margin-bottom: 30px;">
      <h3 style="color: #800000; font-size: 20px; margin: 0 0 15px 0;">Message:</h3>
      <div style="background-color: white; border: 2px solid #eee; padding: 20px; border-radius: 8px;">
        <p style="color: #333; font-size: 16px; line-height: 1.6; margin: 0; white-space: pre-wrap;">{html.escape(contact.message)}</p>
      </div>
    </div>
    <div style="text-align: center; margin-top: 40px; padding-top: 30px; border-top: 1px solid #eee;">
      <p style="color: #999; font-size: 14px; margin: 0;">
        This message was sent from the Muse contact form.<br>
        Reply directly to this email to respond to {name}.
      </p>
    </div>"""
    return _PAGE.format(title="New Contact Form Message", heading="New Contact Form Message", body=body)


def render_newsletter_html() -> str:
    body = """    <div style="background-color: #f8f8f8; padding: 30px; border-radius: 8px; margin-bottom: 30px;">
      <h2 style="color: #333; font-size: 24px; margin: 0 0 15px 0;">Thank you for subscribing!</h2>
      <p style="color: #666; font-size: 16px; line-height: 1.6; margin: 0;">
        Thank you for subscribing to our newsletter. We will send you updates whenever we have exciting news, new product launches, exclusive offers, and the latest fashion trends.
      </p>
    </div>
    <div style="text-align: center; margin-top: 40px; padding-top: 30px; border-top: 1px solid #eee;">
      <p style="color: #999; font-size: 14px; margin: 0;">
        Best regards,<br>
        Muse Team
      </p>
    </div>"""
    return _PAGE.format(title="Welcome to Muse Newsletter", heading="Welcome to Muse!", body=body)


class BrevoMailer:
    """Async client for Brevo's SMTP email endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = BREVO_API_KEY,
        sender_email: Optional[str] = BREVO_SENDER_EMAIL,
        sender_name: Optional[str] = BREVO_SENDER_NAME,
        endpoint: str = BREVO_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.endpoint = endpoint
        self._transport = transport

    async def send_contact(self, contact: ContactMessage) -> Optional[str]:
        """Forward a contact form submission to the inbox. Returns Brevo's messageId."""
        validate_contact(contact)
        payload = {
            "sender": {
                "name": self.sender_name or CONTACT_SENDER_NAME,
                "email": self.sender_email or DEFAULT_SENDER_EMAIL,
            },
            "to": [{"email": self.sender_email or DEFAULT_INBOX_EMAIL, "name": "Muse Team"}],
            "replyTo": {"email": contact.email, "name": contact.full_name},
            "subject": f"New Contact Form Message from {contact.full_name}",
            "htmlContent": render_contact_html(contact),
        }
        return await self._send(payload)

    async def subscribe(self, email: str) -> Optional[str]:
        """Send the newsletter welcome email. Returns Brevo's messageId."""
        validate_email(email)
        payload = {
            "sender": {
                "name": self.sender_name or NEWSLETTER_SENDER_NAME,
                "email": self.sender_email or DEFAULT_SENDER_EMAIL,
            },
            "to": [{"email": email}],
            "subject": "Welcome to Muse Newsletter!",
            "htmlContent": render_newsletter_html(),
        }
        return await self._send(payload)

    async def _send(self, payload: Dict[str, Any]) -> Optional[str]:
        if not self.api_key:
            raise MailerError("Brevo API key is missing")

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "api-key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=HTTP_TIMEOUT) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise MailerError(f"Brevo request failed: {e}") from e

        if response.is_error:
            logger.error("Brevo API error (%s): %s", response.status_code, response.text)
            raise MailerError(f"Brevo returned HTTP {response.status_code}")

        try:
            result = response.json()
        except ValueError:
            result = {}
        return result.get("messageId") if isinstance(result, dict) else None
